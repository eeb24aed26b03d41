import sys

from passgen.cli import main

sys.exit(main(sys.argv[1:]))
