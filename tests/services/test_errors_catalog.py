import pytest

from kubedeployer.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error("push_image", image="reg.io/app:1.0")

    assert "Failed to push Docker image reg.io/app:1.0." in message
    assert "Suggested action:" in message


def test_actionable_error_rejects_unknown_code():
    with pytest.raises(KeyError):
        actionable_error("unknown_step")
