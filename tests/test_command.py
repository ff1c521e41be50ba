from fuzzwell.command import CommandInput
from fuzzwell.models import Config


def test_value_is_command_output():
    command = CommandInput("FUZZ", "echo hello", Config())
    assert command.value() == b"hello\n"


def test_position_is_exported_to_command():
    command = CommandInput("FUZZ", "echo $FFUF_NUM", Config())
    command.position = 7
    assert command.value() == b"7\n"


def test_failing_command_gives_empty_value():
    command = CommandInput("FUZZ", "echo partial; exit 1", Config())
    assert command.value() == b""


def test_missing_shell_gives_empty_value(tmp_path):
    config = Config(input_shell=str(tmp_path / "no-such-shell"))
    command = CommandInput("FUZZ", "echo hello", config)
    assert command.value() == b""


def test_total_and_has_next_follow_input_num():
    config = Config(input_num=2)
    command = CommandInput("FUZZ", "echo x", config)
    assert command.total() == config.input_num
    assert command.has_next()
    command.increment_position()
    command.increment_position()
    assert not command.has_next()
    command.reset_position()
    assert command.position == 0
    assert command.has_next()


def test_custom_shell_is_used():
    config = Config(input_shell="/bin/sh")
    command = CommandInput("FUZZ", "echo x", config)
    assert command.shell == config.input_shell


def test_enable_and_disable():
    command = CommandInput("FUZZ", "echo x", Config())
    command.disable()
    assert command.active is False
    command.enable()
    assert command.active is True