"""Configuration management for bagcheck using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".bagcheck.json"

SCHEMA_NAMES = (
    "dataset.xml",
    "files.xml",
    "agreements.xml",
    "provenance.xml",
    "amd.xml",
    "emd.xml",
)


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class OtherIdPrefix(BaseModel):
    """Organizational identifier prefix a data station user may use."""
    user: str
    prefix: str


class ValidationConfig(BaseModel):
    """Validation configuration section."""
    profile_version: str = Field(alias="profileVersion", default="1.0.0")
    other_id_prefixes: list[OtherIdPrefix] = Field(alias="otherIdPrefixes", default_factory=list)
    licenses: list[str] = Field(default_factory=lambda: [
        "http://creativecommons.org/publicdomain/zero/1.0",
        "http://creativecommons.org/licenses/by/4.0",
        "http://creativecommons.org/licenses/by-sa/4.0",
        "http://creativecommons.org/licenses/by-nc/3.0",
        "http://creativecommons.org/licenses/by-nc/4.0",
        "http://creativecommons.org/licenses/by-nc-sa/3.0",
        "http://creativecommons.org/licenses/by-nc-sa/4.0",
        "http://creativecommons.org/licenses/by-nd/4.0",
        "http://creativecommons.org/licenses/by-nc-nd/4.0",
        "http://dans.knaw.nl/en/about/organisation-and-policy/legal-information/DANSLicence.pdf",
        "http://opendatacommons.org/licenses/by/1-0/index.html",
        "http://opensource.org/licenses/BSD-2-Clause",
        "http://opensource.org/licenses/BSD-3-Clause",
        "http://opensource.org/licenses/MIT",
        "http://www.apache.org/licenses/LICENSE-2.0",
        "http://www.gnu.org/licenses/gpl-3.0.en.html",
        "http://www.gnu.org/licenses/lgpl-3.0.txt",
        "http://www.gnu.org/licenses/old-licenses/gpl-2.0.en.html",
        "http://www.mozilla.org/en-US/MPL/2.0/FAQ/",
    ])

    model_config = ConfigDict(populate_by_name=True)


class XmlSchemaConfig(BaseModel):
    """Locations of the XML schemas, keyed by schema name."""
    dataset_xml: str = Field(alias="dataset.xml", default="https://easy.dans.knaw.nl/schemas/md/ddm/ddm.xsd")
    files_xml: str = Field(alias="files.xml", default="https://easy.dans.knaw.nl/schemas/bag/metadata/files/files.xsd")
    agreements_xml: str = Field(
        alias="agreements.xml",
        default="https://easy.dans.knaw.nl/schemas/bag/metadata/agreements/agreements.xsd"
    )
    provenance_xml: str = Field(
        alias="provenance.xml",
        default="https://easy.dans.knaw.nl/schemas/bag/metadata/prov/provenance.xsd"
    )
    amd_xml: str = Field(alias="amd.xml", default="https://easy.dans.knaw.nl/schemas/bag/metadata/amd/amd.xsd")
    emd_xml: str = Field(alias="emd.xml", default="https://easy.dans.knaw.nl/schemas/md/emd/emd.xsd")

    model_config = ConfigDict(populate_by_name=True)

    def build_map(self) -> dict[str, str]:
        """Return the schema locations keyed by schema name."""
        return self.model_dump(by_alias=True)


class DataverseConfig(BaseModel):
    """Data station (Dataverse) connection section."""
    base_url: str = Field(alias="baseUrl", default="http://localhost:8080")
    api_token: str = Field(alias="apiToken", default="")
    timeout: float = 30.0
    allowed_creator_role: str = Field(alias="allowedCreatorRole", default="dsContributor")
    allowed_editor_role: str = Field(alias="allowedEditorRole", default="contributorplus")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout must be > 0")
        return v

    model_config = ConfigDict(populate_by_name=True)


class ApiConfig(BaseModel):
    """HTTP API configuration section."""
    bind: str = "127.0.0.1"  # localhost only
    port: int = 20330
    max_upload_size: int = Field(alias="maxUploadSize", default=1024 * 1024 * 1024)

    @field_validator("bind")
    @classmethod
    def validate_bind_address(cls, v):
        """Validate bind address - only localhost addresses allowed."""
        allowed_localhost = ["127.0.0.1", "localhost", "::1"]
        if v not in allowed_localhost:
            raise ValueError(f"bind address must be localhost only, got: {v}")
        return v

    @field_validator("port")
    @classmethod
    def validate_port_range(cls, v):
        """Validate port is in valid range."""
        if not (1024 <= v <= 65535):
            raise ValueError(f"port must be between 1024-65535, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO

    model_config = ConfigDict(use_enum_values=True)


class BagcheckConfig(BaseModel):
    """Complete bagcheck configuration model."""
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    xml_schemas: XmlSchemaConfig = Field(alias="xmlSchemas", default_factory=XmlSchemaConfig)
    dataverse: DataverseConfig = Field(default_factory=DataverseConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def load_config(config_path: str | Path | None = None) -> BagcheckConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .bagcheck.json

    Returns:
        BagcheckConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return BagcheckConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    else:
        return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .bagcheck.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> BagcheckConfig:
    """Create default configuration."""
    return BagcheckConfig()
