"""Tests for specification validation."""

from typing import TYPE_CHECKING, Any

import pytest
from pydantic import ValidationError

from pytest_scrn.core import ConfigValidator
from pytest_scrn.errors import InvalidConfiguration, MissingConfiguration
from pytest_scrn.schema import CustomAction, ScreenshotSetup

if TYPE_CHECKING:
    from pathlib import Path
    from re import Pattern


def test_validate_missing_configuration() -> None:
    """Reject an absent specification."""
    with pytest.raises(MissingConfiguration, match=r'^Missing screenshot configuration'):
        ConfigValidator.validate(None)


@pytest.mark.parametrize('raw, expect_message', (
    pytest.param({}, r'^Field required', id='no screenshots'),
    pytest.param({'screenshots': []}, r'^List should have at least 1 item', id='empty screenshots'),
    pytest.param(
        {'screenshots': [{'visit': '/index.html'}]},
        r'^Field required',
        id='item without image',
    ),
    pytest.param(
        {'screenshots': [{'image': 'a.png', 'visit': '/', 'unknown': 1}]},
        r'^Extra inputs are not permitted',
        id='extra fields',
    ),
    pytest.param(
        {'screenshots': [{'image': 'a.png', 'visit': '/', 'actions': [{'click': 1}]}]},
        r'^Input should be a valid',
        id='invalid click parameters',
    ),
    pytest.param(['not', 'a', 'mapping'], r'^Screenshot configuration must be a mapping', id='list'),
))
def test_validate_invalid_configuration(raw: Any, expect_message: 'Pattern') -> None:  # noqa: ANN401
    """Reject structurally invalid specifications."""
    with pytest.raises(InvalidConfiguration, match=expect_message):
        ConfigValidator.validate(raw)


def test_validate_requires_title(spec_data: dict) -> None:
    """Reject a specification without a title when a title is required."""
    del spec_data['title']

    assert ConfigValidator.validate(spec_data).title is None

    with pytest.raises(InvalidConfiguration, match=r'^Screenshot configuration requires a title'):
        ConfigValidator.validate(spec_data, require_title=True)


def test_validate_returns_immutable_spec(spec_data: dict) -> None:
    """Validate a specification into an immutable model."""
    spec = ConfigValidator.validate(spec_data)

    assert isinstance(spec, ScreenshotSetup)
    assert spec.base_url == 'http://localhost:8080'
    assert len(spec.screenshots) == 3
    assert ConfigValidator.validate(spec) is spec

    with pytest.raises(ValidationError, match=r'frozen'):
        spec.title = 'Changed'  # type: ignore[misc]


def test_validate_actions() -> None:
    """Validate known and unknown action kinds in declaration order."""
    spec = ConfigValidator.validate({
        'screenshots': [{
            'image': 'a.png',
            'visit': '/',
            'actions': [
                {'click': 'button'},
                {'dance': {'moves': 3}},
                {'scrollTo': {'position': 'bottom'}},
                {'screenshot': 'b.png'},
            ],
        }],
    })

    actions = spec.screenshots[0].actions

    assert [action.kind for action in actions] == ['click', 'dance', 'scrollTo', 'screenshot']
    assert isinstance(actions[1], CustomAction)
    assert actions[1].params == {'moves': 3}


def test_validate_single_action() -> None:
    """Accept a single action given as a mapping."""
    spec = ConfigValidator.validate({
        'screenshots': [{
            'image': 'a.png',
            'visit': '/',
            'actions': {'wait': 100},
        }],
    })

    (action,) = spec.screenshots[0].actions

    assert action.kind == 'wait'
    assert action.params == 100


def test_validate_error_snippet() -> None:
    """Show the failing fragment of the specification."""
    with pytest.raises(InvalidConfiguration) as error:
        ConfigValidator.validate({
            'screenshots': [{'image': 'a.png', 'visit': '/', 'skip': 'sometimes'}],
        }, filename='scrn_test.yaml')

    message = f'{error.value}'

    assert 'in "scrn_test.yaml"' in message
    assert 'skip: sometimes' in message


def test_load_file(tmp_path: 'Path') -> None:
    """Load a specification from YAML."""
    path = tmp_path / 'scrn_test.yaml'
    path.write_text(
        'title: Test\n'
        'screenshots:\n'
        '  - image: a.png\n'
        '    visit: /\n',
        encoding='utf-8',
    )

    spec = ConfigValidator.load(path, require_title=True)

    assert spec.title == 'Test'


@pytest.mark.parametrize('content, error, expect_message', (
    pytest.param('', MissingConfiguration, r'^Missing screenshot configuration', id='empty file'),
    pytest.param('title: [Test\n', InvalidConfiguration, r'^Invalid YAML', id='invalid yaml'),
    pytest.param('title: Test\n', InvalidConfiguration, r'^Field required', id='no screenshots'),
))
def test_load_invalid_file(tmp_path: 'Path', content: str,
                           error: type[Exception], expect_message: 'Pattern') -> None:
    """Fail loading invalid YAML specifications."""
    path = tmp_path / 'scrn_test.yaml'
    path.write_text(content, encoding='utf-8')

    with pytest.raises(error, match=expect_message):
        ConfigValidator.load(path)
