"""Device-linking side channel: show WhatsApp pairing QR codes to the operator."""

import io
from pathlib import Path

import qrcode
from loguru import logger
from rich.console import Console

from censusbot.config.schema import PairingConfig

LINK_STEPS = (
    "1. Open WhatsApp: Settings > Linked Devices > Link a Device.",
    "2. Scan the QR code image from {path} on your computer.",
    "3. Alternatively, scan the QR code printed in this terminal.",
)


def build_qr(payload: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(border=2)
    qr.add_data(payload)
    qr.make(fit=True)
    return qr


def ascii_qr(payload: str) -> str:
    """Render the QR code as terminal text."""
    buf = io.StringIO()
    build_qr(payload).print_ascii(out=buf, invert=True)
    return buf.getvalue()


def save_qr_image(payload: str, path: Path, dark: str = "#000000", light: str = "#FFFFFF") -> Path:
    """Write the QR code as a PNG file and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    image = build_qr(payload).make_image(fill_color=dark, back_color=light)
    image.save(str(path))
    return path


class QRPairingPresenter:
    """
    Surfaces each pairing payload the bridge emits: the raw string and an
    ASCII rendering on the console, plus a PNG on disk. Failures here are
    logged and never stop the channel.
    """

    def __init__(self, config: PairingConfig, console: Console | None = None):
        self.config = config
        self.console = console or Console()
        self.last_image: Path | None = None

    def present(self, payload: str) -> Path | None:
        logger.info(f"QR Code generated (scan within {self.config.qr_timeout} seconds): {payload}")

        if self.config.print_terminal:
            try:
                self.console.print(ascii_qr(payload), markup=False, highlight=False)
            except Exception as e:
                logger.warning(f"Failed to print QR code in terminal: {e}")

        logger.info("Generating graphical QR code image...")
        try:
            path = save_qr_image(
                payload,
                Path(self.config.qr_image_path).expanduser(),
                dark=self.config.dark_color,
                light=self.config.light_color,
            )
        except Exception as e:
            logger.error(f"Failed to generate QR code image: {e}")
            return None

        logger.info(f"Graphical QR code saved as {path}")
        for step in LINK_STEPS:
            logger.info(step.format(path=path))
        self.last_image = path
        return path
