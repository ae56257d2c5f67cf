"""Tests for initialization, fetch, the full step cycle, the loader and timers."""

import pytest
import jax.numpy as jnp
import numpy as np
from chip8vm import (
    create_state, fetch, step, decode, load_program, load_rom, sound_active, sound_stopped,
    RomTooLargeError, Chip8Error, FONT_DATA, MAX_ROM_SIZE, PROGRAM_START
)
from conftest import with_program, with_registers


class TestInitialize:
    """Power-on state."""

    def test_font_installed(self, fresh_state):
        assert jnp.array_equal(fresh_state.memory[0x50:0xA0], FONT_DATA)
        assert jnp.sum(fresh_state.memory[:0x50]) == 0
        assert jnp.sum(fresh_state.memory[0xA0:]) == 0

    def test_registers_cleared(self, fresh_state):
        assert jnp.sum(fresh_state.V) == 0
        assert fresh_state.I == 0
        assert fresh_state.stack.pointer == 0
        assert jnp.sum(fresh_state.stack.data) == 0
        assert not jnp.any(fresh_state.keypad)
        assert fresh_state.pc == 0x200

    def test_timers_start_full(self, fresh_state):
        assert fresh_state.delay_timer == 255
        assert fresh_state.sound_timer == 255

    def test_timer_start_configurable(self):
        state = create_state(timer_start=0)
        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_initial_frame_requests_redraw(self, fresh_state):
        assert fresh_state.draw_flag
        assert not jnp.any(fresh_state.display)

    def test_no_fault(self, fresh_state):
        assert fresh_state.fault == 0

    def test_invalid_draw_mode(self):
        with pytest.raises(ValueError):
            create_state(draw_mode="stretch")

    def test_invalid_timer_start(self):
        with pytest.raises(ValueError):
            create_state(timer_start=256)


class TestLoader:
    """Program loading."""

    def test_load_program_at_entry_point(self, fresh_state):
        state = load_program(fresh_state, b"\x12\x34\x56")

        assert [int(b) for b in state.memory[0x200:0x204]] == [0x12, 0x34, 0x56, 0x00]
        assert jnp.array_equal(state.memory[:0x200], fresh_state.memory[:0x200])

    def test_load_sequence_of_ints(self, fresh_state):
        state = load_program(fresh_state, [0xA2, 0xF0])
        assert state.memory[0x200] == 0xA2
        assert state.memory[0x201] == 0xF0

    def test_load_largest_program(self, fresh_state):
        program = (np.arange(MAX_ROM_SIZE) % 256).astype(np.uint8)

        state = load_program(fresh_state, program.tobytes())

        assert MAX_ROM_SIZE == 3584
        assert np.array_equal(np.asarray(state.memory[PROGRAM_START:]), program)

    def test_reject_oversized_program(self, fresh_state):
        before = np.asarray(fresh_state.memory).copy()

        with pytest.raises(RomTooLargeError) as excinfo:
            load_program(fresh_state, bytes(MAX_ROM_SIZE + 1))

        assert excinfo.value.size == 3585
        assert excinfo.value.limit == 3584
        assert isinstance(excinfo.value, Chip8Error)
        assert np.array_equal(np.asarray(fresh_state.memory), before)

    def test_load_rom_file(self, fresh_state, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(b"\x00\xE0\x12\x00")

        state = load_rom(fresh_state, str(rom))

        assert [int(b) for b in state.memory[0x200:0x204]] == [0x00, 0xE0, 0x12, 0x00]


class TestDecode:
    """Opcode field extraction."""

    def test_fields(self):
        decoded = decode(0xD3A5)

        assert decoded.raw == 0xD3A5
        assert decoded.family == 0xD
        assert decoded.x == 0x3
        assert decoded.y == 0xA
        assert decoded.n == 0x5
        assert decoded.nn == 0xA5
        assert decoded.nnn == 0x3A5


class TestFetch:
    """Instruction fetch."""

    def test_fetch_big_endian(self, fresh_state):
        state = with_program(fresh_state, 0xA2F0)

        state, instruction = fetch(state)

        assert instruction == 0xA2F0
        assert state.opcode == 0xA2F0
        assert state.pc == 0x200


class TestStep:
    """Full instruction cycles."""

    def test_step_set_register(self, fresh_state):
        state = step(with_program(fresh_state, 0x6A12))

        assert state.V[0xA] == 0x12
        assert state.pc == 0x202
        assert state.opcode == 0x6A12

    def test_step_add_with_carry(self, fresh_state):
        state = with_registers(with_program(fresh_state, 0x8AB4), VA=0xFF, VB=0x01)

        state = step(state)

        assert state.V[0xA] == 0x00
        assert state.V[15] == 1

    def test_call_then_return(self, fresh_state):
        state = with_program(fresh_state, 0x2300)
        state = state.replace(memory=state.memory.at[0x300].set(0x00).at[0x301].set(0xEE))

        state = step(state)
        assert state.pc == 0x300
        assert state.stack.pointer == 1

        state = step(state)
        assert state.pc == 0x202
        assert state.stack.pointer == 0

    def test_skip_advances_four(self, fresh_state):
        state = step(with_program(fresh_state, 0x3000))
        assert state.pc == 0x204

    def test_step_with_keypad(self, fresh_state):
        state = with_registers(with_program(fresh_state, 0xE19E), V1=4)
        keypad = [False] * 16
        keypad[4] = True

        state = step(state, jnp.array(keypad))

        assert state.pc == 0x204
        assert state.keypad[4]

    def test_program_runs(self, quiet_state):
        """Small loop: count V0 up to 3 then stop on a self jump."""
        state = with_program(
            quiet_state,
            0x7001,  # 200: V0 += 1
            0x3003,  # 202: skip if V0 == 3
            0x1200,  # 204: jump 200
            0x1206,  # 206: jump 206
        )
        for _ in range(12):
            state = step(state)

        assert state.V[0] == 3
        assert state.pc == 0x206


class TestWaitForKeyCycle:
    """FX0A across steps."""

    def test_wait_repeats_until_key(self, fresh_state):
        state = with_program(fresh_state, 0xF30A)

        for _ in range(3):
            state = step(state)
            assert state.pc == 0x200
            assert jnp.sum(state.V) == 0
            assert state.delay_timer == 255

        keypad = jnp.zeros(16, dtype=jnp.bool_).at[0xB].set(True)
        state = step(state, keypad)

        assert state.V[3] == 0xB
        assert state.pc == 0x202


class TestTimers:
    """Timer countdown."""

    def test_timers_tick_each_cycle(self, fresh_state):
        state = with_program(fresh_state, 0x1200)

        state = step(step(state))

        assert state.delay_timer == 253
        assert state.sound_timer == 253

    def test_delay_reaches_zero_after_five_steps(self, quiet_state):
        state = with_program(quiet_state, 0x6005, 0xF015, 0x1204)
        state = step(step(state))
        assert state.delay_timer == 5

        for remaining in (4, 3, 2, 1, 0):
            state = step(state)
            assert state.delay_timer == remaining

        for _ in range(3):
            state = step(state)
            assert state.delay_timer == 0

    def test_sound_signal(self, quiet_state):
        state = with_program(quiet_state, 0x6002, 0xF018, 0x1204)
        state = step(step(state))
        assert sound_active(state)

        before = step(state)
        assert sound_active(before)
        after = step(before)

        assert not sound_active(after)
        assert sound_stopped(before, after)
        assert not sound_stopped(after, step(after))


class TestUnknownOpcodes:
    """Unknown opcode policies."""

    def test_unknown_opcode_is_skipped(self, fresh_state):
        state = step(with_program(fresh_state, 0x5121))

        assert state.unknown_opcode
        assert state.opcode == 0x5121
        assert state.pc == 0x202
        assert state.delay_timer == 254
        assert state.fault == 0

    def test_flag_clears_on_next_step(self, fresh_state):
        state = step(step(with_program(fresh_state, 0x0000, 0x6000)))
        assert not state.unknown_opcode
