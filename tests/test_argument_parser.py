"""Tests for command line and environment input handling."""

from __future__ import annotations

import pytest

from argument_parser import parse_arguments
from errors import ConfigError

FLAGS = ['--owner', 'hashicorp', '--repo', 'test', '--token', 'secret']


def test_flags_build_config() -> None:
    cfg = parse_arguments(
        ['updateRefs', *FLAGS, '--base', 'trunk', '--target', 'primary'], environ={}
    )

    assert cfg.command == 'updateRefs'
    assert (cfg.owner, cfg.repo, cfg.token) == ('hashicorp', 'test', 'secret')
    assert (cfg.base, cfg.target) == ('trunk', 'primary')
    assert cfg.api_url == 'https://api.github.com'
    assert cfg.clone_temp_dir is None
    assert cfg.pull_number is None


def test_defaults_for_base_and_target() -> None:
    cfg = parse_arguments(['createBranches', *FLAGS], environ={})

    assert cfg.base == 'master'
    assert cfg.target == 'main'


def test_environment_supplies_inputs() -> None:
    environ = {
        'INCLUSIFY_OWNER': 'hashicorp',
        'INCLUSIFY_REPO': 'test',
        'INCLUSIFY_TOKEN': 'secret',
        'INCLUSIFY_API_URL': 'https://github.example.com/api/v3/',
    }

    cfg = parse_arguments(['updatePulls'], environ=environ)

    assert (cfg.owner, cfg.repo, cfg.token) == ('hashicorp', 'test', 'secret')
    assert cfg.api_url == 'https://github.example.com/api/v3'


def test_environment_wins_over_flags() -> None:
    environ = {'INCLUSIFY_OWNER': 'from-env', 'INCLUSIFY_TARGET': ''}

    cfg = parse_arguments(['createBranches', *FLAGS, '--target', 'trunk'], environ=environ)

    assert cfg.owner == 'from-env'
    # Empty environment values do not override flags
    assert cfg.target == 'trunk'


def test_missing_inputs_are_listed() -> None:
    with pytest.raises(ConfigError) as excinfo:
        parse_arguments(['createBranches', '--repo', 'test'], environ={})

    message = str(excinfo.value)
    assert message.endswith(': owner, token')
    assert 'INCLUSIFY_' in message


def test_exclusions_include_built_in_entries() -> None:
    cfg = parse_arguments(
        ['updateRefs', *FLAGS, '--exclusion', 'scripts/, ,.teamcity.yml,'], environ={}
    )

    assert cfg.exclusions == ('scripts/', '.teamcity.yml', '.git/', 'go.mod', 'go.sum')
    assert cfg.user_exclusions == ('scripts/', '.teamcity.yml')


def test_no_exclusions_still_protects_git_metadata() -> None:
    cfg = parse_arguments(['updateRefs', *FLAGS], environ={})

    assert cfg.exclusions == ('.git/', 'go.mod', 'go.sum')
    assert cfg.user_exclusions == ()


@pytest.mark.parametrize(
    'extra, expected',
    [
        (['--owner', 'bad owner'], 'Owner contains invalid characters'),
        (['--repo', '../etc'], 'Repository name contains invalid characters'),
        (['--target', 'feature..x'], 'not a valid git ref name'),
        (['--api-url', 'ftp://example.com'], 'invalid API URL'),
    ],
)
def test_invalid_inputs_are_rejected(extra, expected) -> None:
    with pytest.raises(ConfigError, match=expected):
        parse_arguments(['createBranches', *FLAGS, *extra], environ={})


@pytest.mark.parametrize('argv', [[], ['help'], ['--help'], ['updateRefs', 'help']])
def test_help_exits_zero(argv, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        parse_arguments(argv, environ={})

    assert excinfo.value.code in (None, 0)
    assert 'usage: inclusify' in capsys.readouterr().out


@pytest.mark.parametrize('argv', [['--version'], ['createBranches', '--version']])
def test_version_exits_zero(argv, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        parse_arguments(argv, environ={})

    assert excinfo.value.code == 0
    assert 'inclusify 0.2.0' in capsys.readouterr().out


@pytest.mark.parametrize('command', ['createBranches', 'updateRefs', 'mergePull'])
def test_subcommand_help_flag_exits_zero(command, capsys) -> None:
    """--help short-circuits even when required inputs are missing."""
    with pytest.raises(SystemExit) as excinfo:
        parse_arguments([command, '--help'], environ={})

    assert excinfo.value.code == 0
    assert f'usage: inclusify {command}' in capsys.readouterr().out


def test_unknown_subcommand_is_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        parse_arguments(['renameEverything', *FLAGS], environ={})

    assert excinfo.value.code == 2
    assert 'invalid choice' in capsys.readouterr().err


def test_pull_commands_take_number() -> None:
    cfg = parse_arguments(['mergePull', *FLAGS, '--number', '12'], environ={})

    assert cfg.command == 'mergePull'
    assert cfg.pull_number == 12


def test_pull_commands_require_number() -> None:
    with pytest.raises(ConfigError, match='closePull requires a pull request number'):
        parse_arguments(['closePull', *FLAGS], environ={})
