#!/usr/bin/env python3
"""
State Revenue Pipeline - Entry Point

Builds the per-state tax revenue dataset from Census tax and population
extracts.

Usage:
    python main.py build --config config/ingestion.config.json
    python main.py build --config config/ingestion.config.json --output out.json
    python main.py normalize --config config/ingestion.config.json
    python main.py states
"""

from state_revenue.cli import main

if __name__ == "__main__":
    main()
