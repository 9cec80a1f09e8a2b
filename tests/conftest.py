"""Shared pytest fixtures."""

import logging

import pytest

from netfix.config import Settings
from netfix.diagnostics import DiagnosticEngine
from netfix.inspector import StateInspector
from netfix.runner import RemediationRunner
from tests.fakes import FakeDevice, FakeExecutor, FakePrivilege, FakeProber


@pytest.fixture
def settings():
    return Settings(settle_delay=0, toggle_delay=0)


@pytest.fixture
def logger():
    return logging.getLogger('netfix.tests')


@pytest.fixture
def build(settings, logger):
    """Assemble engine and runner around the given fakes"""

    def _build(privilege=None, prober=None, executor=None, device=None):
        privilege = privilege or FakePrivilege(True)
        prober = prober or FakeProber(True)
        executor = executor or FakeExecutor()
        device = device or FakeDevice()
        inspector = StateInspector(device, executor, settings, logger)
        engine = DiagnosticEngine(privilege, prober, inspector, executor, device, settings, logger=logger)
        runner = RemediationRunner(engine, executor, prober, inspector, device, settings, logger)
        return engine, runner

    return _build
