# main.py
import sys

from PyQt6.QtWidgets import QApplication

from kmotion import config


def main():
    app = QApplication(sys.argv)
    app.setApplicationName("K-Motion Studio")

    # Crée et montre la fenêtre
    from kmotion.ui.main_window import MainWindow
    win = MainWindow()
    win.show()
    print(f"✅ K-Motion Studio prêt (exports -> {config.EXPORT_DIR}, log={config.LOG_LEVEL})")

    # Catch global exceptions pour voir un éventuel plantage silencieux
    def _excepthook(t, v, tb):
        import traceback
        traceback.print_exception(t, v, tb)
        try:
            win.session.shutdown()
        finally:
            sys.exit(1)
    sys.excepthook = _excepthook

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
