import logging as _logging

from certvault.lib import logger


def _record(level):
    return _logging.LogRecord("certvault", level, __file__, 1, "message", None, None)


def test_bullets():
    formatter = logger.Formatter()
    assert formatter.format(_record(_logging.INFO)) == "[*] message"
    assert formatter.format(_record(_logging.DEBUG)) == "[+] message"
    assert formatter.format(_record(_logging.WARNING)) == "[!] message"
    assert formatter.format(_record(_logging.ERROR)) == "[-] message"


def test_init_verbose():
    logger.init(verbose=True)
    assert logger.is_verbose() is True
    assert logger.logging.level == _logging.DEBUG

    logger.init()
    assert logger.is_verbose() is False
    assert logger.logging.level == _logging.INFO
    assert len(logger.logging.handlers) == 1
    assert logger.logging.propagate is False


def test_init_writes_to_stdout(capsys):
    logger.init()
    logger.logging.info("hello")
    assert capsys.readouterr().out == "[*] hello\n"
