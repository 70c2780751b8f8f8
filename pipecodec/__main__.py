"""Package entry point for ``python -m pipecodec``."""

from pipecodec.cli import main

if __name__ == "__main__":
    main()
