"""Entry point: replay or analyse the N-camera backtracking search.

Examples
--------
    python camviz.py --n 4 --speed fast
    python camviz.py --n 5 --block 0,0 --block 2,3 --no-delay --log-csv run.csv
    python camviz.py --sweep --experiments
    python camviz.py --quick-test
"""

from ncameras.analysis.cli import main

if __name__ == "__main__":
    main()
