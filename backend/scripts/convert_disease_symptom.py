#!/usr/bin/env python3
"""
Convert a disease-symptom CSV into the graph JSON used by the graph view.

Usage:
    python scripts/convert_disease_symptom.py \
        --input data/DiseaseAndSymptoms.csv \
        --precautions "data/Disease precaution.csv" \
        --output public/data/disease_symptom_graph.json \
        --syncToFunction
"""

import sys
import os

# Add parent directory to path to import the package without installing it
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from diseasegraph.cli import main

if __name__ == "__main__":
    sys.exit(main())
