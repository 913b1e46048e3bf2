import pytest

from escape_hatch.config import (
    DEFAULT_COMMANDS,
    deep_merge,
    describe,
    load_config,
    merge_paths,
    options_from_env,
)
from escape_hatch.errors import ConfigurationError


def test_defaults_without_environment() -> None:
    config = load_config(env={})

    assert config.path_names == ("primary", "secondary")
    assert config.debounce_ms == 400
    assert config.on_overflow == "noop"
    assert config.nuclear is False
    assert config.path("primary").ladder == (
        "smart_close",
        "save",
        "save_quit",
        "quit",
        "quit_all",
    )


def test_camel_case_aliases_are_accepted() -> None:
    config = load_config({"debounceMs": 250, "onOverflow": "repeatLast"}, env={})

    assert config.debounce_ms == 250
    assert config.on_overflow == "repeat_last"


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        load_config({"debounce": 250}, env={})


def test_environment_overrides_defaults_but_not_user_options() -> None:
    env = {
        "ESCAPE_HATCH_DEBOUNCE_MS": "150",
        "ESCAPE_HATCH_ON_OVERFLOW": "clamp",
        "ESCAPE_HATCH_NUCLEAR": "yes",
    }

    from_env = load_config(env=env)
    assert (from_env.debounce_ms, from_env.on_overflow, from_env.nuclear) == (150, "clamp", True)

    explicit = load_config({"debounce_ms": 600}, env=env)
    assert explicit.debounce_ms == 600
    assert explicit.on_overflow == "clamp"


def test_blank_environment_values_are_ignored() -> None:
    assert options_from_env({"ESCAPE_HATCH_DEBOUNCE_MS": "  "}) == {}


def test_malformed_environment_integer_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        load_config(env={"ESCAPE_HATCH_DEBOUNCE_MS": "soon"})


def test_path_override_updates_by_name() -> None:
    config = load_config(
        {"paths": [{"name": "secondary", "keys": ["<leader>q"], "ladder": ["quit"]}]},
        env={},
    )

    secondary = config.path("secondary")
    assert secondary.keys == ("<leader>q",)
    assert secondary.ladder == ("quit",)
    assert secondary.description == "Escalating escape without saving"


def test_new_path_is_appended() -> None:
    config = load_config(
        {"paths": [{"name": "tabs", "keys": ["<C-w>"], "ladder": ["quit", "quit_all"]}]},
        env={},
    )

    assert config.path_names == ("primary", "secondary", "tabs")


def test_new_path_without_ladder_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        load_config({"paths": [{"name": "tabs", "keys": ["<C-w>"]}]}, env={})


def test_disabled_path_is_dropped() -> None:
    config = load_config({"paths": [{"name": "secondary", "enabled": False}]}, env={})

    assert config.path_names == ("primary",)


def test_disabling_every_path_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        load_config(
            {
                "paths": [
                    {"name": "primary", "enabled": False},
                    {"name": "secondary", "enabled": False},
                ]
            },
            env={},
        )


@pytest.mark.parametrize(
    "paths",
    [
        [{"name": "primary", "colour": "red"}],
        [{"keys": ["<Esc>"], "ladder": ["quit"]}],
        [{"name": "primary", "ladder": []}],
        [{"name": "primary", "ladder": "quit"}],
        {"name": "primary"},
    ],
)
def test_invalid_path_tables(paths) -> None:
    with pytest.raises(ConfigurationError):
        load_config({"paths": paths}, env={})


def test_commands_merge_key_by_key() -> None:
    config = load_config({"commands": {"save": "update"}}, env={})

    assert config.commands["save"] == "update"
    assert config.commands["quit_all"] == DEFAULT_COMMANDS["quit_all"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"debounce_ms": "fast"},
        {"debounce_ms": True},
        {"preserved_buffer_patterns": ["("]},
        {"preserved_buffer_patterns": "Telescope"},
        {"completion_engine": "company-mode"},
        {"custom_actions": {"notify": "not callable"}},
        {"on_overflow": "wrap"},
        {"commands": {"save": 1}},
    ],
)
def test_invalid_options_are_rejected(overrides) -> None:
    with pytest.raises(ConfigurationError):
        load_config(overrides, env={})


def test_config_is_read_only() -> None:
    config = load_config(env={})

    with pytest.raises(TypeError):
        config.commands["save"] = "update"  # type: ignore[index]


def test_effective_ladder_appends_nuclear_action() -> None:
    config = load_config(env={})
    primary = config.path("primary")

    assert len(config.effective_ladder(primary)) == 5
    nuclear = config.with_nuclear(True).effective_ladder(primary)
    assert nuclear.final == "force_quit_all"
    assert len(nuclear) == 6


def test_describe_reflects_nuclear_toggle() -> None:
    config = load_config({"paths": [{"name": "secondary", "enabled": False}]}, env={})

    assert describe(config) == [
        "escape-hatch configuration:",
        "  debounce: 400ms, overflow: noop, nuclear: disabled",
        "  primary [<Esc>] Escalating escape",
        "    Level 1: [x] smart_close (Clear UI / leave mode)",
        "    Level 2: [x] save (Save)",
        "    Level 3: [x] save_quit (Save & Quit)",
        "    Level 4: [x] quit (Quit)",
        "    Level 5: [x] quit_all (Quit All)",
        "    Level 6: [ ] force_quit_all (Force Quit All)",
    ]
    assert describe(config.with_nuclear(True))[-1] == (
        "    Level 6: [x] force_quit_all (Force Quit All)"
    )


def test_deep_merge_replaces_non_mappings() -> None:
    merged = deep_merge({"a": {"b": 1, "c": 2}, "d": [1]}, {"a": {"c": 3}, "d": [2]})

    assert merged == {"a": {"b": 1, "c": 3}, "d": [2]}


def test_merge_paths_does_not_mutate_inputs() -> None:
    base = [{"name": "primary", "ladder": ("quit",)}]

    merged = merge_paths(base, [{"name": "primary", "ladder": ("save",)}])

    assert merged == [{"name": "primary", "ladder": ("save",)}]
    assert base == [{"name": "primary", "ladder": ("quit",)}]
