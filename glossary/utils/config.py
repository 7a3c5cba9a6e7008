import os
import yaml
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from glossary.storage import TermsService, create_terms_service

DOTENV_PATH = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(DOTENV_PATH)

CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

DEFAULT_TERMS_PATH = "Terms.xml"


class PathResolver:
    def __init__(self, root: str):
        self.base_path = Path(root).resolve()

    def resolve_path(self, relative_path: Optional[str]) -> Path:
        """Resolves relative path under base path."""
        if not relative_path:
            return self.base_path
        return (self.base_path / relative_path).resolve()

    def resolve_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Resolves all *_path, *_dir and *_env_var keys in a flat or nested config dict.
        An `<key>_env_var` entry names an environment variable that, when set,
        overrides `<key>`.
        """
        def _resolve_value(key: str, value: Any) -> Any:
            if isinstance(value, str) and (key.endswith("_path") or key.endswith("_dir")):
                return str(self.resolve_path(value))
            return value

        def _resolve(obj: Dict[str, Any]):
            new_obj = {}
            overrides = {}
            for key, value in obj.items():
                if isinstance(value, dict):
                    new_obj[key] = _resolve(value)
                elif isinstance(value, str) and key.endswith("_env_var"):
                    env_val = os.getenv(value)
                    if env_val:
                        overrides[key[:-len("_env_var")]] = env_val
                else:
                    new_obj[key] = _resolve_value(key, value)
            for key, value in overrides.items():
                new_obj[key] = _resolve_value(key, value)
            return new_obj
        return _resolve(config)


def setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logging.getLogger("glossary").setLevel(level)


def load_config(config_path: str = CONFIG_PATH) -> Dict[str, Any]:
    with open(config_path, "r") as f:
        yaml_config = yaml.safe_load(f) or {}

    # Setup logging based on config
    setup_logging(debug=yaml_config.get("debug", False))

    resolver = PathResolver(yaml_config.pop("data_dir", None) or os.getcwd())
    config = resolver.resolve_config(yaml_config)
    config["data_dir"] = str(resolver.base_path)
    config.setdefault("terms_path", str(resolver.resolve_path(DEFAULT_TERMS_PATH)))
    return config


def load_terms_service(config_path: str = CONFIG_PATH) -> TermsService:
    config = load_config(config_path)
    return create_terms_service(config["terms_path"], config.get("storage_backend"))
