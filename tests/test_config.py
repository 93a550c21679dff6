import pytest

from argus.config import Config, UIConfig, default_config, default_keybindings


def test_default_config():
    cfg = default_config()
    assert cfg.defaults.backend == "claude"
    assert "claude" in cfg.backends
    assert cfg.backends["claude"].command == "claude --dangerously-skip-permissions"
    assert cfg.projects == {}
    assert cfg.ui.show_elapsed is True
    assert cfg.ui.show_icons is True
    assert cfg.ui.theme == "default"


def test_default_configs_are_independent():
    first = default_config()
    first.projects["x"] = None
    assert default_config().projects == {}


def test_default_keybindings():
    kb = default_keybindings()
    assert kb.new == "n"
    assert kb.quit == "q"
    assert kb.help == "?"
    assert kb.attach == "enter"


def test_empty_config_has_no_backend():
    cfg = Config()
    assert cfg.defaults.backend == ""
    assert cfg.backends == {}


@pytest.mark.parametrize(
    "value, expected",
    [(None, True), (True, True), (False, False)],
)
def test_should_cleanup_worktrees(value, expected):
    assert UIConfig(cleanup_worktrees=value).should_cleanup_worktrees() is expected