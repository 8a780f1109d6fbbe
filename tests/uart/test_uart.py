from bfsoc.runtime.uart import UartReceiver, UartTransmitter, TxState, RxState

from unit_utils import drive_frame, frame_levels


def transmit(byte: int, steps_per_bit: int = 16) -> list[int]:
    ''' Start a frame and record the line level on every step '''
    tx = UartTransmitter()
    levels = []
    step = 0

    tx.step(True, byte, False)
    assert tx.busy

    while tx.busy:
        step += 1
        tx.step(False, 0, step % steps_per_bit == 0)
        levels.append(tx.line)

    return levels


def test_transmit_frame():
    levels = transmit(0xA5)
    bits = levels[15::16]   # one level per full bit period

    assert bits[:10] == frame_levels(0xA5)
    assert levels[-1] == 1


def test_transmit_bits_last_a_full_period():
    levels = transmit(0x0F)
    first_low = levels.index(0)
    # start bit exactly one period
    assert levels[first_low:first_low + 16] == [0] * 16
    assert levels[first_low + 16] == 1


def test_transmitter_ignores_start_while_busy():
    tx = UartTransmitter()
    tx.step(True, 0x11, False)
    tx.step(True, 0x22, True)
    assert tx.shifter == 0x11
    assert tx.state == TxState.START_BIT


def test_transmitter_idle_after_frame():
    tx = UartTransmitter()
    tx.step(True, 0x00, False)

    for _ in range(11):
        tx.step(False, 0, True)

    assert tx.state == TxState.IDLE
    assert not tx.busy
    assert tx.line == 1


def test_receive_byte():
    rx = UartReceiver()
    seen, errors = drive_frame(rx, 0x3C)
    assert seen == [0x3C]
    assert errors == 0
    assert rx.state == RxState.IDLE
    assert not rx.busy


def test_receive_framing_error():
    rx = UartReceiver()
    seen, errors = drive_frame(rx, 0x55, stop=0)
    assert seen == []
    assert errors == 1
    assert rx.state == RxState.IDLE


def test_valid_is_one_step_pulse():
    rx = UartReceiver()
    pulses = 0

    for level in [1] * 2 + frame_levels(0x81) + [1] * 2:
        for _ in range(16):
            rx.step(level, True)
            pulses += rx.valid

    assert pulses == 1


def test_glitch_is_ignored():
    rx = UartReceiver()

    for level in [1] * 4 + [0] * 3 + [1] * 40:
        rx.step(level, True)
        assert not rx.valid
        assert not rx.framing_error

    assert rx.state == RxState.IDLE
    assert not rx.busy


def test_busy_during_frame():
    rx = UartReceiver()
    busy = []

    for level in [1] * 2 + frame_levels(0x00) + [1] * 2:
        for _ in range(16):
            rx.step(level, True)
            busy.append(rx.busy)

    assert not busy[0]
    assert any(busy)
    assert not busy[-1]


def test_loopback_all_bytes():
    tx = UartTransmitter()
    rx = UartReceiver()
    received = []
    errors = 0

    for byte in range(256):
        tx.step(True, byte, False)
        step = 0

        while tx.busy or rx.busy:
            step += 1
            line = tx.line
            tx.step(False, 0, step % 16 == 0)
            rx.step(line, True)

            if rx.valid:
                received.append(rx.data)

            errors += rx.framing_error

    assert received == list(range(256))
    assert errors == 0
