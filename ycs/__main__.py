"""Package entry point for ``python -m ycs``."""

from ycs.main import main

if __name__ == "__main__":
    main()
