"""Module entrypoint for `python -m swocker`."""

from swocker.main import main

if __name__ == "__main__":
    main()
