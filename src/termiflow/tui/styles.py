"""Rich styles shared by the runtime and the panes.

Pure data, no widget code.
"""

from rich.style import Style

HIGHLIGHT = "#7D56F4"

ACTIVE_TAB = Style(color="#FFFFFF", bgcolor=HIGHLIGHT, bold=True)
INACTIVE_TAB = Style(color="grey58")
TAB_SEPARATOR = Style(color=HIGHLIGHT)

PROMPT = Style(color="#00FFFF")
PATH = Style(color="#FFFF00", bold=True)
ERROR = Style(color="#FF0000")
DIM = Style(dim=True)

LIST_TITLE = Style(color="#FFFDF5", bgcolor="#25A065", bold=True)
ITEM_TITLE = Style(bold=True)
ITEM_SELECTED = Style(color=HIGHLIGHT, bold=True)
ITEM_DESCRIPTION = Style(color="grey58")

USER_LABEL = Style(color="#00FFFF", bold=True)
MODEL_LABEL = Style(color=HIGHLIGHT, bold=True)
TOOL_TEXT = Style(color="grey70")
SYSTEM_TEXT = Style(color="#FFAF00")
