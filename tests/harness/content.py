"""Text extraction from the rendered frame."""

from termiflow.tui.app import TermiflowApp


def frame_text(app: TermiflowApp) -> str:
    """Plain text of the Composer frame the app is showing."""
    return app.composer.view().plain
