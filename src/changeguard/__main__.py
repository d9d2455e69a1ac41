"""Allow `python -m changeguard REQUEST...`."""

from changeguard.cli import main

if __name__ == "__main__":
    main()
