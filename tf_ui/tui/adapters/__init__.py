from tf_ui.tui.adapters.prompt_toolkit_runtime import PromptToolkitRuntime

__all__ = ["PromptToolkitRuntime"]
