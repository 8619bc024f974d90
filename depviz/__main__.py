import sys

from depviz.app import main

# Development mode
if __name__ == "__main__":
    sys.exit(main())
