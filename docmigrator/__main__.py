import sys
from docmigrator.main import main

sys.exit(main())
