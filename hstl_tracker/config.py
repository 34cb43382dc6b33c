"""
Tracker Configuration
Loads configuration from config.yaml and secrets from .env
"""
import os
from pathlib import Path
from dotenv import load_dotenv
import yaml
from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict, Any


# Load .env from project root for secrets
PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def load_yaml_config() -> Dict[str, Any]:
    """Load configuration from config.yaml"""
    config_path = Path(os.getenv("TRACKER_CONFIG", PROJECT_ROOT / "config.yaml"))

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            "Please create config.yaml in the project root."
        )

    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


# Load YAML config
_yaml_config = load_yaml_config()


class AuthConfig(BaseModel):
    """Admin credential and token signing configuration"""
    token_ttl_seconds: int = 3600
    algorithm: str = "HS256"
    admin_password_hash: Optional[str] = None
    jwt_secret: Optional[str] = None

    @property
    def password_configured(self) -> bool:
        return bool(self.admin_password_hash)

    @property
    def secret_configured(self) -> bool:
        return bool(self.jwt_secret)


class StoreConfig(BaseModel):
    """Recruitment store configuration"""
    uri: str = "data/hstl_tracker.db"
    collection: str = "recruitments"

    @property
    def db_path(self) -> Path:
        """Resolve the store URI to a database file path."""
        uri = self.uri
        if uri.startswith("sqlite:///"):
            uri = uri[len("sqlite:///"):]
        path = Path(uri)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path


class ServerConfig(BaseModel):
    """Server Configuration"""
    host: str
    port: int
    cors_origins: List[str]
    api_prefix: str = "/api"


class LoggingConfig(BaseModel):
    """Logging Configuration"""
    level: str = "INFO"
    log_dir: str = "./logs"
    max_days: int = 15
    json_format: bool = True


class Config(BaseModel):
    """Main Configuration - loaded from config.yaml"""
    auth: AuthConfig
    store: StoreConfig
    server: ServerConfig
    logging: LoggingConfig

    # Paths
    project_root: Path = PROJECT_ROOT
    frontend_dir: Path = PROJECT_ROOT / "frontend"

    model_config = ConfigDict(arbitrary_types_allowed=True)


def create_config_from_yaml(yaml_data: Dict[str, Any]) -> Config:
    """Create Config object from YAML data"""
    # Build auth config with secrets from env
    auth_data = yaml_data.get("auth", {})
    auth_config = AuthConfig(
        token_ttl_seconds=auth_data.get("token_ttl_seconds", 3600),
        algorithm=auth_data.get("algorithm", "HS256"),
        admin_password_hash=os.getenv("ADMIN_PASSWORD_HASH"),
        jwt_secret=os.getenv("JWT_SECRET"),
    )

    # Build store config, env overrides yaml
    store_data = yaml_data.get("store", {})
    store_config = StoreConfig(
        uri=os.getenv("STORE_URI", store_data.get("uri", "data/hstl_tracker.db")),
        collection=os.getenv("STORE_COLLECTION", store_data.get("collection", "recruitments")),
    )

    # Build server config
    server_data = yaml_data.get("server", {})
    server_config = ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=server_data.get("port", 8000),
        cors_origins=server_data.get("cors_origins", ["*"]),
        api_prefix=server_data.get("api_prefix", "/api"),
    )

    # Build logging config
    logging_data = yaml_data.get("logging", {})
    logging_config = LoggingConfig(
        level=logging_data.get("level", "INFO"),
        log_dir=logging_data.get("log_dir", "./logs"),
        max_days=logging_data.get("max_days", 15),
        json_format=logging_data.get("json_format", True),
    )

    return Config(
        auth=auth_config,
        store=store_config,
        server=server_config,
        logging=logging_config,
    )


# Create global config instance
config = create_config_from_yaml(_yaml_config)


def reload_config():
    """Reload configuration from config.yaml"""
    global config, _yaml_config
    _yaml_config = load_yaml_config()
    config = create_config_from_yaml(_yaml_config)
    return config
