"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, Field


class DatasetConfig(BaseModel):
    """Census dataset file location."""
    path: str = "census.json"
    root_key: str = "tanzania_census_2022"  # Namespaced section holding the regions list


class WhatsAppConfig(BaseModel):
    """WhatsApp channel configuration (talks to a WhatsApp Web bridge over websocket)."""
    enabled: bool = True
    bridge_url: str = "ws://localhost:3001"
    bridge_token: str = ""  # Shared secret sent in the first frame, if the bridge wants one
    allow_from: list[str] = Field(default_factory=list)  # Allowed sender ids, empty = everyone
    reconnect_delay: float = 5.0
    reconnect_max_delay: float = 60.0


class ChannelsConfig(BaseModel):
    """Configuration for chat channels."""
    whatsapp: WhatsAppConfig = Field(default_factory=WhatsAppConfig)


class PairingConfig(BaseModel):
    """How device-linking QR codes are surfaced to the operator."""
    qr_image_path: str = "qr.png"
    qr_timeout: int = 90  # Seconds a QR code stays valid
    print_terminal: bool = True
    dark_color: str = "#000000"
    light_color: str = "#FFFFFF"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: str = ""  # Optional log file, rotated by loguru


class Config(BaseModel):
    """Root configuration for censusbot."""
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)
    pairing: PairingConfig = Field(default_factory=PairingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def dataset_path(self) -> Path:
        return Path(self.dataset.path).expanduser()

    @property
    def qr_image_path(self) -> Path:
        return Path(self.pairing.qr_image_path).expanduser()
