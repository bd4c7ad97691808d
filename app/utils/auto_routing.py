from pathlib import Path
from typing import Dict, List

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def get_module(base_dir: str = "routes") -> List[str]:
    base_path = PROJECT_ROOT / base_dir
    return sorted(
        p.name
        for p in base_path.iterdir()
        if p.is_dir() and not p.name.startswith("__") and not p.name.startswith(".")
    )


def get_model_modules(base_dir: str = "applications") -> List[str]:
    """Dotted paths of every ``models.py`` under ``applications/<app>/``."""
    return [
        f"{base_dir}.{app_name}.models"
        for app_name in get_module(base_dir)
        if (PROJECT_ROOT / base_dir / app_name / "models.py").is_file()
    ]


def get_single_app_structure(base_dir: str = "applications") -> Dict[str, dict]:
    return {
        "models": {
            "models": [*get_model_modules(base_dir), "aerich.models"],
            "default_connection": "default",
        }
    }
