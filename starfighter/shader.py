"""GLSL shader programs and uniform helpers."""

from __future__ import annotations

from pathlib import Path

import numpy as np

_STAGES = frozenset({"vertex", "fragment", "geometry"})


class ShaderError(Exception):
    """A shader could not be read, compiled or linked."""


def read_shader_source(path) -> str:
    """Return the text of a shader file."""
    try:
        return Path(path).read_text()
    except OSError as exc:
        raise ShaderError(f"shader file not successfully read: {path}: {exc}") from exc


def compile_shader(source, shader_type, label):
    """Compile one shader stage; ``shader_type`` is 'vertex', 'fragment' or 'geometry'."""
    if shader_type not in _STAGES:
        raise ValueError(f"unknown shader type: {shader_type!r}")
    from pyglet.graphics.shader import Shader as StageShader
    from pyglet.graphics.shader import ShaderException

    try:
        return StageShader(source, shader_type)
    except ShaderException as exc:
        raise ShaderError(f"shader compilation error of type: {label}\n{exc}") from exc


def _components(args, count) -> tuple[float, ...]:
    if len(args) == 1:
        values = tuple(float(c) for c in np.asarray(args[0], dtype=float).reshape(-1))
    else:
        values = tuple(float(a) for a in args)
    if len(values) != count:
        raise TypeError(f"expected {count} components, got {len(values)}")
    return values


def _column_major(mat, size) -> tuple[float, ...]:
    matrix = np.asarray(mat, dtype=float).reshape(size, size)
    return tuple(float(v) for v in matrix.flatten(order="F"))


class Shader:
    """A linked vertex + fragment program read from two files."""

    def __init__(self, vertex_path, fragment_path):
        vertex_code = read_shader_source(vertex_path)
        fragment_code = read_shader_source(fragment_path)
        from pyglet.graphics.shader import ShaderException, ShaderProgram

        vertex = compile_shader(vertex_code, "vertex", "VERTEX")
        fragment = compile_shader(fragment_code, "fragment", "FRAGMENT")
        try:
            self.program = ShaderProgram(vertex, fragment)
        except ShaderException as exc:
            raise ShaderError(f"program linking error of type: PROGRAM\n{exc}") from exc
        self.id = self.program.id

    def use(self):
        self.program.use()

    def _set(self, name, value):
        from pyglet.graphics.shader import ShaderException

        try:
            self.program[name] = value
        except (KeyError, ShaderException):
            # An inactive or unknown uniform is silently ignored, as GL does.
            pass

    def set_bool(self, name, value):
        self._set(name, int(bool(value)))

    def set_int(self, name, value):
        self._set(name, int(value))

    def set_float(self, name, value):
        self._set(name, float(value))

    def set_vec2(self, name, *args):
        self._set(name, _components(args, 2))

    def set_vec3(self, name, *args):
        self._set(name, _components(args, 3))

    def set_vec4(self, name, *args):
        self._set(name, _components(args, 4))

    def set_mat2(self, name, mat):
        self._set(name, _column_major(mat, 2))

    def set_mat3(self, name, mat):
        self._set(name, _column_major(mat, 3))

    def set_mat4(self, name, mat):
        self._set(name, _column_major(mat, 4))