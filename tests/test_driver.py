"""Tests for the execution driver."""

import io

import numpy as np
import pytest
from chix8 import DecodeFault, DriverState, EmulatorConfig, ExecutionDriver
from chix8.logging import RunLogger
from conftest import load_program


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def make_driver(fresh_state, clock, log_stream):
    def _make(words, **kwargs):
        state = load_program(fresh_state, words)
        logger = RunLogger(stream=log_stream, show_timestamps=False)
        return ExecutionDriver(state, clock=clock, sleep=clock.advance, logger=logger, **kwargs)
    return _make


def test_present_on_draw(make_driver):
    frames = []
    # V0 = 0; I = glyph "0"; draw it; spin
    driver = make_driver([0x6000, 0xF029, 0xD015, 0x1206], present=frames.append)

    assert not driver.cycle()
    assert not driver.cycle()
    assert driver.cycle()
    assert not driver.cycle()

    assert driver.presents == 1
    assert len(frames) == 1
    frame = frames[0]
    assert frame.shape == (64, 32)
    assert frame[:4, 0].all() and not frame[4, 0]
    assert frame[0, 1] and frame[3, 1] and not frame[1, 1]
    assert not frame.flags.writeable


def test_framebuffer_is_a_snapshot(make_driver):
    driver = make_driver([0x6000, 0xF029, 0xD015, 0x00E0, 0x1208])
    for _ in range(3):
        driver.cycle()
    frame = driver.framebuffer()

    driver.cycle()

    assert frame[0, 0]
    assert not driver.framebuffer().any()


def test_timers_follow_wall_clock(make_driver, clock):
    # V0 = 0x10; DT = V0; spin
    driver = make_driver([0x6010, 0xF015, 0x1204])
    for _ in range(3):
        driver.cycle()
    assert driver.state.delay_timer == 16

    # Many cycles without the clock moving do not tick the timer
    for _ in range(20):
        driver.cycle()
    assert driver.state.delay_timer == 16

    clock.advance(3 / 60 + 1e-6)
    driver.cycle()
    assert driver.state.delay_timer == 13


def test_sound_active(make_driver, clock):
    # V0 = 2; ST = V0; spin
    driver = make_driver([0x6002, 0xF018, 0x1204])
    driver.cycle()
    assert not driver.sound_active

    driver.cycle()
    assert driver.sound_active

    clock.advance(2 / 60 + 1e-6)
    driver.cycle()
    assert not driver.sound_active


def test_halt_on_fault(make_driver, log_stream):
    driver = make_driver([0x5121])

    driver.cycle()

    assert driver.status is DriverState.HALTED
    assert not driver.running
    assert isinstance(driver.fault, DecodeFault)
    assert driver.fault.pc == 0x200
    assert driver.fault.word == 0x5121
    assert "Machine halted" in log_stream.getvalue()

    # A halted driver does no more work
    assert not driver.cycle()
    assert driver.cycles == 1


def test_key_queue_feeds_wait_for_key(make_driver):
    # V5 = key; spin
    driver = make_driver([0xF50A, 0x1202])

    driver.cycle()
    assert driver.state.pc == 0x200

    driver.submit_key(7, True)
    driver.cycle()
    assert driver.state.V[5] == 7
    assert driver.state.pc == 0x202


def test_key_release_is_applied_in_order(make_driver):
    driver = make_driver([0x1200])

    driver.submit_key(3, True)
    driver.submit_key(3, False)
    driver.submit_key(9, True)
    driver.cycle()

    keypad = np.array(driver.state.keypad)
    assert not keypad[3]
    assert keypad[9]


@pytest.mark.parametrize("index", [-1, 16])
def test_submit_invalid_key(make_driver, index):
    driver = make_driver([0x1200])
    with pytest.raises(ValueError):
        driver.submit_key(index, True)


def test_run_stops_on_request(make_driver):
    driver = make_driver([0x1200])
    polls = []

    def poll():
        polls.append(driver.cycles)
        if len(polls) == 5:
            driver.request_stop()

    status = driver.run(poll=poll)

    assert status is DriverState.RUNNING
    assert driver.cycles == 4
    assert polls == [0, 1, 2, 3, 4]


def test_run_paces_to_instruction_rate(make_driver, clock):
    config = EmulatorConfig(instructions_per_second=100)
    driver = make_driver([0x1200], config=config)

    def poll():
        if driver.cycles == 50:
            driver.request_stop()

    driver.run(poll=poll)

    assert clock.now == pytest.approx(0.5)


def test_run_halts_on_fault(make_driver):
    driver = make_driver([0x6001, 0x0123])

    status = driver.run()

    assert status is DriverState.HALTED
    assert driver.cycles == 2
    assert driver.fault.pc == 0x202
