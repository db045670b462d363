from tf_ui.tui.system.components.form import Form, FormState
from tf_ui.tui.system.components.group import Group
from tf_ui.tui.system.components.multi_select import MultiSelect
from tf_ui.tui.system.components.option_list import CursorMove
from tf_ui.tui.system.components.select import Select
from tf_ui.tui.system.components.text import Text

__all__ = ["CursorMove", "Form", "FormState", "Group", "MultiSelect", "Select", "Text"]
