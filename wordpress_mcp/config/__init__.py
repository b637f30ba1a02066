"""
Configuration management for WordPress MCP Server

Loads the tool catalogue from YAML and the connection settings from
environment variables.

License: Mozilla Public License 2.0
"""

import base64
import os
import yaml
import logging
from typing import Dict, List, Any, Optional
from pathlib import Path

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, ValidationError, field_validator

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = ["WORDPRESS_URL", "WORDPRESS_USERNAME", "WORDPRESS_PASSWORD"]

TOOLSETS = ["core", "pages", "media", "search"]

# Argument shapes a tool can be dispatched with
CALL_SHAPES = {"none", "params", "id", "id_params", "id_force"}


class ToolConfig:
    """Configuration for an MCP tool"""

    def __init__(self, data: Dict[str, Any]):
        self.name = data['name']
        self.description = data['description']
        self.toolset = data.get('toolset', 'core')
        self.wordpress_call = data['wordpress_call']
        self.input_schema = data.get('input_schema') or {"type": "object", "properties": {}}

        if self.toolset not in TOOLSETS:
            raise ValueError(f"Tool '{self.name}' has unknown toolset '{self.toolset}'")
        if self.wordpress_call.get('args', 'params') not in CALL_SHAPES:
            raise ValueError(f"Tool '{self.name}' has unknown argument shape "
                             f"'{self.wordpress_call.get('args')}'")

    @property
    def method(self) -> str:
        return self.wordpress_call['method']

    @property
    def call_shape(self) -> str:
        return self.wordpress_call.get('args', 'params')

    def __repr__(self):
        return f"ToolConfig(name={self.name}, toolset={self.toolset})"


class ConnectionSettings(BaseModel):
    """
    Fixed connection configuration for one WordPress site.

    Built once when the client is constructed and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    site_url: AnyHttpUrl
    username: str
    password: str
    timeout: float = 30.0

    @field_validator('username', 'password')
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator('timeout')
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @property
    def site_root(self) -> str:
        return str(self.site_url).rstrip('/')

    @property
    def api_root(self) -> str:
        """Root of the REST API index (site name, description, timezone)"""
        return f"{self.site_root}/wp-json/"

    @property
    def base_url(self) -> str:
        return f"{self.site_root}/wp-json/wp/v2"

    @property
    def authorization(self) -> str:
        credentials = base64.b64encode(f"{self.username}:{self.password}".encode('utf-8'))
        return f"Basic {credentials.decode('ascii')}"

    @classmethod
    def create(cls, site_url: Optional[str], username: Optional[str], password: Optional[str],
               timeout: float = 30.0) -> "ConnectionSettings":
        """
        Build settings, converting validation problems into ConfigurationError.

        Raises:
            ConfigurationError: If the URL is invalid or a credential is empty
        """
        try:
            return cls(site_url=site_url or "", username=username or "",
                       password=password or "", timeout=timeout)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid WordPress connection settings: {problems}") from e


class Config:
    """Main configuration manager"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_dir: Path to configuration directory. If None, uses default location.
        """
        if config_dir is None:
            # Default to config directory relative to this file
            config_dir = Path(__file__).parent

        self.config_dir = Path(config_dir)
        self.tools: List[ToolConfig] = []
        self.testing_mode: bool = False

        self._load_tools_config()

    def _load_tools_config(self):
        """Load tools configuration from YAML"""
        tools_file = self.config_dir / "tools.yaml"

        if not tools_file.exists():
            logger.warning(f"Tools configuration not found: {tools_file}")
            return

        try:
            with open(tools_file, 'r') as f:
                config = yaml.safe_load(f) or {}

            self.testing_mode = config.get('testing', False)

            seen = set()
            for tool_data in config.get('tools', []):
                tool = ToolConfig(tool_data)
                if tool.name in seen:
                    raise ValueError(f"Duplicate tool name in catalogue: {tool.name}")
                seen.add(tool.name)
                self.tools.append(tool)

            logger.debug(f"Loaded {len(self.tools)} tool configurations")
            if self.testing_mode:
                logger.info("Testing mode ENABLED - detailed tool execution logs will be shown")

        except Exception as e:
            logger.error(f"Failed to load tools configuration: {e}")
            raise

    def get_tool_by_name(self, name: str) -> Optional[ToolConfig]:
        """Get a tool configuration by name"""
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def get_all_tools(self) -> List[ToolConfig]:
        """Get all tool configurations"""
        return self.tools

    def check_environment(self):
        """
        Verify the required WordPress variables are set.

        Raises:
            ConfigurationError: Listing every missing variable
        """
        missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

    def get_connection_settings(self) -> ConnectionSettings:
        """Build connection settings from the environment"""
        self.check_environment()
        return ConnectionSettings.create(
            os.getenv("WORDPRESS_URL"),
            os.getenv("WORDPRESS_USERNAME"),
            os.getenv("WORDPRESS_PASSWORD"),
            timeout=self.get_request_timeout(),
        )

    def get_request_timeout(self) -> float:
        """Get request timeout from environment (default: 30)"""
        timeout_env = os.getenv("WORDPRESS_TIMEOUT")
        if timeout_env:
            try:
                return float(timeout_env)
            except ValueError:
                raise ConfigurationError(f"WORDPRESS_TIMEOUT must be a number, got '{timeout_env}'")
        return 30.0

    def get_max_workers(self) -> int:
        """Get max workers from environment (default: 10)"""
        workers_env = os.getenv("WORDPRESS_MAX_WORKERS")
        if workers_env:
            try:
                return int(workers_env)
            except ValueError:
                raise ConfigurationError(f"WORDPRESS_MAX_WORKERS must be an integer, got '{workers_env}'")
        return 10

    def get_enabled_toolsets(self) -> List[str]:
        """
        Get enabled toolsets from WORDPRESS_TOOLSETS (default: all).

        The core toolset is always enabled.
        """
        toolsets_env = os.getenv("WORDPRESS_TOOLSETS")
        if not toolsets_env or toolsets_env.strip().lower() == "all":
            return list(TOOLSETS)

        requested = [name.strip().lower() for name in toolsets_env.split(',') if name.strip()]
        unknown = [name for name in requested if name not in TOOLSETS]
        if unknown:
            raise ConfigurationError(
                f"Unknown toolset(s) in WORDPRESS_TOOLSETS: {', '.join(unknown)} "
                f"(available: {', '.join(TOOLSETS)})"
            )
        return [name for name in TOOLSETS if name == 'core' or name in requested]

    def __repr__(self):
        return f"Config(tools={len(self.tools)})"
