import sys

from quicksort_visualizer.main import main

sys.exit(main())
