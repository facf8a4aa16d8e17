import logging

import sdpx
from sdpx import console, logger, print_session


def test_logger_name():
    assert logger.name == "sdpx"
    assert isinstance(logger, logging.Logger)


def test_print_session(capsys):
    console.width = 100
    print_session({"version": 0, "name": "-"}, title="Offer")

    out = capsys.readouterr().out
    assert "Offer" in out
    assert "'version': 0" in out


def test_version():
    assert sdpx.__version__ == "0.1.0"
    assert "parse" in sdpx.__all__
