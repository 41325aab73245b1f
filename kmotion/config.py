# kmotion/config.py
import os
from datetime import date

from dotenv import load_dotenv

# Charge .env (si présent) avant de lire les variables
load_dotenv()

# =========================
#  Chart par défaut
# =========================

DEFAULT_SYMBOL: str = os.getenv("KMOTION_SYMBOL", "BTC/USD")
DEFAULT_TITLE: str = os.getenv("KMOTION_TITLE", "Simulation de marché")
DEFAULT_X_LABEL: str = os.getenv("KMOTION_X_LABEL", "Temps")
DEFAULT_Y_LABEL: str = os.getenv("KMOTION_Y_LABEL", "Prix (USD)")
DEFAULT_BULL_COLOR: str = "#22c55e"
DEFAULT_BEAR_COLOR: str = "#ef4444"
DEFAULT_INITIAL_PRICE: float = float(os.getenv("KMOTION_INITIAL_PRICE", "100"))
DEFAULT_TIMEFRAME: str = os.getenv("KMOTION_TIMEFRAME", "1d")  # 1m, 5m, 15m, 30m, 1h, 4h, 1d, 1w, 1mo


def default_start_date() -> str:
    """Date du jour au format YYYY-MM-DD (pas d'heure -> ouverture 09:00)."""
    return date.today().isoformat()


# =========================
#  Génération / lecture
# =========================

# Amplitude (%) d'une bougie ajoutée à la main
DEFAULT_VOLATILITY: float = float(os.getenv("KMOTION_VOLATILITY", "1.5"))

FPS_CHOICES: tuple[int, ...] = (1, 3, 5, 10, 20, 30)
DEFAULT_FPS: int = int(os.getenv("KMOTION_FPS", "5"))

# =========================
#  Export
# =========================

EXPORT_DIR: str = os.getenv("KMOTION_EXPORT_DIR", "exports")

# Délai (ms) avant de lancer la capture : laisse le temps à la frame 0 d'être peinte
EXPORT_SETTLE_MS: int = int(os.getenv("KMOTION_SETTLE_MS", "500"))

# Cadence d'échantillonnage du recorder vidéo (indépendante des fps de lecture)
CAPTURE_FPS: int = int(os.getenv("KMOTION_CAPTURE_FPS", "30"))
VIDEO_EXT: str = os.getenv("KMOTION_VIDEO_EXT", "mp4")

# Taille de la surface hors-écran tant que le widget n'a pas été affiché
SURFACE_WIDTH: int = int(os.getenv("KMOTION_SURFACE_W", "1280"))
SURFACE_HEIGHT: int = int(os.getenv("KMOTION_SURFACE_H", "720"))

# =========================
#  Logs
# =========================

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
DEBUG: bool = LOG_LEVEL.upper() == "DEBUG"
