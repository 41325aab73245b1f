# kmotion/__init__.py
import os
from pathlib import Path

__version__ = "0.1.0"

# Windows : rend les DLL Qt trouvables avant le premier import des modules graphiques
if hasattr(os, "add_dll_directory"):
    try:
        from PyQt6.QtCore import QLibraryInfo

        qt_bin = Path(QLibraryInfo.path(QLibraryInfo.LibraryPath.BinariesPath))
        os.add_dll_directory(str(qt_bin))
    except Exception as e:
        print("[WARN] Qt BinariesPath not added:", e)
