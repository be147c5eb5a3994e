"""Vertex data, textures and GPU-backed meshes."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

import numpy as np

VERTEX_FLOATS = 14
_FLOAT_SIZE = 4
# (attribute location, component count, float offset within a vertex)
_ATTRIBUTES = (
    (0, 3, 0),  # position
    (1, 3, 3),  # normal
    (2, 2, 12),  # texture coordinates
    (3, 3, 6),  # tangent
    (4, 3, 9),  # bi-tangent
)
_NUMBERED_KINDS = frozenset({"texture_diffuse", "texture_specular", "texture_normal", "texture_height"})


def _gl():
    from pyglet import gl

    return gl


def _zeros(n):
    return lambda: np.zeros(n)


@dataclass
class Vertex:
    position: np.ndarray = field(default_factory=_zeros(3))
    normal: np.ndarray = field(default_factory=_zeros(3))
    tangent: np.ndarray = field(default_factory=_zeros(3))
    bi_tangent: np.ndarray = field(default_factory=_zeros(3))
    tex_coords: np.ndarray = field(default_factory=_zeros(2))

    def __post_init__(self):
        self.position = np.array(self.position, dtype=float).reshape(3)
        self.normal = np.array(self.normal, dtype=float).reshape(3)
        self.tangent = np.array(self.tangent, dtype=float).reshape(3)
        self.bi_tangent = np.array(self.bi_tangent, dtype=float).reshape(3)
        self.tex_coords = np.array(self.tex_coords, dtype=float).reshape(2)


@dataclass
class Texture:
    id: int
    type: str
    path: str


class Mesh:
    """Indexed triangles with textures; GPU buffers are made by setup() or the first draw."""

    def __init__(self, vertices, indices, textures):
        self.vertices = list(vertices)
        self.indices = [int(i) for i in indices]
        self.textures = list(textures)
        self.diffuse = np.zeros(3)
        self.vao = None
        self._vbo = None
        self._ebo = None

    def interleaved(self) -> np.ndarray:
        """Vertex data as float32 rows: position, normal, tangent, bi-tangent, uv."""
        rows = [
            np.concatenate((v.position, v.normal, v.tangent, v.bi_tangent, v.tex_coords))
            for v in self.vertices
        ]
        if not rows:
            return np.empty((0, VERTEX_FLOATS), dtype=np.float32)
        return np.array(rows, dtype=np.float32)

    def texture_uniform_names(self) -> list[str]:
        """Sampler uniform name for each texture, in texture-unit order."""
        counters: Counter[str] = Counter()
        names = []
        for texture in self.textures:
            if texture.type in _NUMBERED_KINDS:
                counters[texture.type] += 1
                names.append(f"{texture.type}{counters[texture.type]}")
            else:
                names.append(texture.type)
        return names

    def setup(self):
        """Upload vertices and indices and describe the vertex layout."""
        gl = _gl()
        vao, vbo, ebo = gl.GLuint(), gl.GLuint(), gl.GLuint()
        gl.glGenVertexArrays(1, vao)
        gl.glGenBuffers(1, vbo)
        gl.glGenBuffers(1, ebo)

        data = np.ascontiguousarray(self.interleaved())
        index_data = np.ascontiguousarray(np.asarray(self.indices, dtype=np.uint32))

        gl.glBindVertexArray(vao)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, vbo)
        gl.glBufferData(gl.GL_ARRAY_BUFFER, data.nbytes, data.ctypes.data, gl.GL_STATIC_DRAW)
        gl.glBindBuffer(gl.GL_ELEMENT_ARRAY_BUFFER, ebo)
        gl.glBufferData(
            gl.GL_ELEMENT_ARRAY_BUFFER, index_data.nbytes, index_data.ctypes.data, gl.GL_STATIC_DRAW
        )
        stride = VERTEX_FLOATS * _FLOAT_SIZE
        for location, size, offset in _ATTRIBUTES:
            gl.glEnableVertexAttribArray(location)
            gl.glVertexAttribPointer(location, size, gl.GL_FLOAT, gl.GL_FALSE, stride, offset * _FLOAT_SIZE)
        gl.glBindVertexArray(0)

        self.vao, self._vbo, self._ebo = vao.value, vbo.value, ebo.value

    def draw(self, shader):
        """Bind textures to their samplers and draw the triangles."""
        if self.vao is None:
            self.setup()
        gl = _gl()
        for unit, (texture, name) in enumerate(zip(self.textures, self.texture_uniform_names())):
            gl.glActiveTexture(gl.GL_TEXTURE0 + unit)
            shader.set_vec3("diffuse", self.diffuse)
            shader.set_int(name, unit)
            gl.glBindTexture(gl.GL_TEXTURE_2D, texture.id)
        gl.glBindVertexArray(self.vao)
        gl.glDrawElements(gl.GL_TRIANGLES, len(self.indices), gl.GL_UNSIGNED_INT, 0)
        gl.glBindVertexArray(0)
        gl.glActiveTexture(gl.GL_TEXTURE0)