"""
Project Path Configuration

Centralized path definitions for data and outputs
Using Medallion Architecture: Bronze (raw) → Silver (cleaned) → Gold (aggregates)
"""

from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# ==============================================================================
# MEDALLION ARCHITECTURE (Bronze / Silver / Gold)
# ==============================================================================

DATA_ROOT = PROJECT_ROOT / "data"

# Bronze Layer: Raw, immutable data (as downloaded)
BRONZE = DATA_ROOT / "bronze"
BRONZE_TORONTO = BRONZE / "toronto"
TORONTO_BRONZE_COLLISIONS = BRONZE_TORONTO / "collisions"

# Silver Layer: Cleaned, recoded analysis table
SILVER = DATA_ROOT / "silver"
SILVER_TORONTO = SILVER / "toronto"

# Gold Layer: Aggregated count tables
GOLD = DATA_ROOT / "gold"
GOLD_ANALYTICS = GOLD / "analytics"
TORONTO_GOLD_ANALYTICS = GOLD_ANALYTICS / "toronto"

# ==============================================================================
# DEFAULT FILES
# ==============================================================================

DEFAULT_RAW_COLLISIONS_FILE = TORONTO_BRONZE_COLLISIONS / "ksi_collisions.csv"
DEFAULT_CLEANED_COLLISIONS_FILE = SILVER_TORONTO / "ped_cyclist_collisions.csv"

# ==============================================================================
# OUTPUTS
# ==============================================================================

OUTPUTS_ROOT = PROJECT_ROOT / "outputs"
FIGURES = OUTPUTS_ROOT / "figures"

# ==============================================================================
# DIRECTORY INITIALIZATION
# ==============================================================================

def ensure_directories():
    """Create all necessary directories if they don't exist"""

    bronze_dirs = [BRONZE, BRONZE_TORONTO, TORONTO_BRONZE_COLLISIONS]
    silver_dirs = [SILVER, SILVER_TORONTO]
    gold_dirs = [GOLD, GOLD_ANALYTICS, TORONTO_GOLD_ANALYTICS]
    output_dirs = [OUTPUTS_ROOT, FIGURES]

    for directory in bronze_dirs + silver_dirs + gold_dirs + output_dirs:
        directory.mkdir(parents=True, exist_ok=True)


# ==============================================================================
# ARCHITECTURE DOCUMENTATION
# ==============================================================================

ARCHITECTURE_DOCS = """
MEDALLION DATA ARCHITECTURE
===========================

Bronze Layer (data/bronze/):
  - Raw KSI extract as downloaded from Toronto Open Data
  - Never modified after download
  - Example: toronto/collisions/ksi_collisions.csv

Silver Layer (data/silver/):
  - Pedestrian and cyclist records only, recoded columns
  - Fully regenerated on every run
  - Example: toronto/ped_cyclist_collisions.csv

Gold Layer (data/gold/):
  - Aggregated count tables for reporting
  - Example: analytics/toronto/counts_by_year.csv
"""

def print_architecture():
    """Print architecture documentation"""
    print(ARCHITECTURE_DOCS)
