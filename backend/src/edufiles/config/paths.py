from pathlib import Path


# =====================================================
# STORAGE ZONES (under DATA_BASE_PATH)
# =====================================================

def uploads_path(base: Path) -> Path:
    return base / "uploads"


def catalog_path(base: Path) -> Path:
    return base / "catalog"


# =====================================================
# CATALOG DB
# =====================================================

def catalog_db_path(base: Path) -> Path:
    return catalog_path(base) / "catalog.sqlite"
