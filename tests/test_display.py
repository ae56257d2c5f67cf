"""Tests for display operations (DXYN)."""

import pytest
import jax.numpy as jnp
from chip8vm import execute
from conftest import setup_sprite_in_memory, with_registers


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xC0, 0xC0])
        state = with_registers(state, V0=10, V1=5, I=0x300)

        state = execute(state, 0xD012)

        assert state.display[10, 5] == 1
        assert state.display[11, 5] == 1
        assert state.display[10, 6] == 1
        assert state.display[11, 6] == 1
        assert state.display[12, 5] == 0
        assert jnp.sum(state.display) == 4
        assert state.V[15] == 0
        assert state.pc == 0x202

    def test_single_pixel_self_collision(self, fresh_state):
        """Drawing 0x80 twice at the origin lights then clears pixel (0, 0)."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80])
        state = with_registers(state, I=0x400)

        state = execute(state, 0xD011)
        assert state.display[0, 0] == 1
        assert state.V[15] == 0
        assert state.draw_flag

        state = execute(state, 0xD011)
        assert state.display[0, 0] == 0
        assert state.V[15] == 1

    def test_xor_behavior(self, fresh_state):
        """Overlapping sprites only flip the overlapping pixels."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xF0])
        state = with_registers(state, V0=8, V1=15, I=0x500)

        state = execute(state, 0xD011)  # x=8..11
        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0xD011)  # x=10..13

        assert [int(state.display[x, 15]) for x in range(8, 14)] == [1, 1, 0, 0, 1, 1]
        assert jnp.sum(state.display) == 4
        assert state.V[15] == 1

    def test_zero_height_sprite(self, fresh_state):
        """DXY0 draws nothing and clears VF."""
        state = with_registers(fresh_state, VF=1, I=0x300)

        state = execute(state, 0xD010)

        assert jnp.sum(state.display) == 0
        assert state.V[15] == 0
        assert state.draw_flag

    def test_different_sprite_heights(self, fresh_state):
        """Only N rows are read."""
        sprite = [0x80, 0x40, 0x20, 0x10, 0x08]
        state = setup_sprite_in_memory(fresh_state, 0x900, sprite)
        state = with_registers(state, V0=10, V1=8, I=0x900)

        state = execute(state, 0xD013)

        assert state.display[10, 8] == 1
        assert state.display[11, 9] == 1
        assert state.display[12, 10] == 1
        assert state.display[13, 11] == 0

    def test_font_glyph_draw(self, fresh_state):
        """The 0 glyph drawn from the font table."""
        state = with_registers(fresh_state, I=0x50)

        state = execute(state, 0xD005)

        assert jnp.sum(state.display) == 14  # F0 90 90 90 F0
        assert state.display[0, 0] == 1
        assert state.display[1, 1] == 0


class TestDrawModes:
    """Off-screen pixels under each draw mode."""

    def test_alias_overflows_into_next_row(self, fresh_state):
        """Legacy mode: x past 63 lands at the start of the next row."""
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])
        state = with_registers(state, V0=60, V1=0, I=0x600)

        state = execute(state, 0xD011)

        for x in range(60, 64):
            assert state.display[x, 0] == 1
        for x in range(0, 4):
            assert state.display[x, 1] == 1
        assert jnp.sum(state.display) == 8

    def test_alias_drops_pixels_past_buffer_end(self, fresh_state):
        """Legacy mode: rows below 31 fall off the end of the buffer."""
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80, 0x80])
        state = with_registers(state, V0=0, V1=30, I=0x700)

        state = execute(state, 0xD013)

        assert state.display[0, 30] == 1
        assert state.display[0, 31] == 1
        assert jnp.sum(state.display) == 2

    def test_wrap_mode(self, wrap_state):
        """Wrap mode: coordinates are taken modulo the screen size."""
        state = setup_sprite_in_memory(wrap_state, 0x600, [0xFF, 0xFF])
        state = with_registers(state, V0=60, V1=31, I=0x600)

        state = execute(state, 0xD012)

        assert state.display[63, 31] == 1
        assert state.display[0, 31] == 1
        assert state.display[63, 0] == 1
        assert state.display[3, 0] == 1
        assert jnp.sum(state.display) == 16

    def test_wrap_mode_large_coordinates(self, wrap_state):
        state = setup_sprite_in_memory(wrap_state, 0x800, [0x80])
        state = with_registers(state, V0=70, V1=37, I=0x800)

        state = execute(state, 0xD011)

        assert state.display[6, 5] == 1

    def test_clip_mode(self, clip_state):
        """Clip mode: pixels off the right and bottom edges are dropped."""
        state = setup_sprite_in_memory(clip_state, 0x600, [0xFF, 0xFF])
        state = with_registers(state, V0=60, V1=31, I=0x600)

        state = execute(state, 0xD012)

        assert jnp.sum(state.display) == 4
        assert state.display[60, 31] == 1
        assert state.display[0, 0] == 0

    @pytest.mark.parametrize("mode_fixture", ["fresh_state", "wrap_state", "clip_state"])
    def test_collision_in_every_mode(self, request, mode_fixture):
        state = setup_sprite_in_memory(request.getfixturevalue(mode_fixture), 0x300, [0x80])
        state = with_registers(state, V0=5, V1=5, I=0x300)

        state = execute(execute(state, 0xD011), 0xD011)

        assert state.V[15] == 1
        assert jnp.sum(state.display) == 0
