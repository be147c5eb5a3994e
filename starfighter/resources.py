"""Model files, materials, textures and shaders, loaded once and shared."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

import numpy as np

from starfighter.mesh import Mesh, Texture, Vertex
from starfighter.shader import compile_shader, read_shader_source

log = logging.getLogger(__name__)

TEXTURE_KINDS = ("texture_diffuse", "texture_specular", "texture_normal", "texture_height")

_MTL_TEXTURE_KEYS = {
    "map_kd": "texture_diffuse",
    "map_ks": "texture_specular",
    "norm": "texture_normal",
    "map_kn": "texture_normal",
    "map_bump": "texture_height",
    "bump": "texture_height",
}


class ModelLoadError(Exception):
    """A model or material file could not be read or understood."""


@dataclass
class Material:
    """Surface description read from a material library."""

    name: str
    diffuse: tuple[float, float, float] = (0.0, 0.0, 0.0)
    textures: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class MeshData:
    """Triangulated vertex data for one mesh of a model file."""

    name: str
    material: str | None
    positions: list[tuple[float, ...]]
    normals: list[tuple[float, ...]]
    indices: list[int]
    tex_coords: list[tuple[float, ...]] | None = None
    tangents: list[tuple[float, ...]] | None = None
    bitangents: list[tuple[float, ...]] | None = None


@dataclass
class ObjScene:
    """Everything read from one OBJ file."""

    meshes: list[MeshData]
    material_libraries: list[Path]


def _tuples(array) -> list[tuple[float, ...]]:
    return [tuple(float(x) for x in row) for row in array]


def _normalize(vectors: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(vectors, axis=-1, keepdims=True)
    return np.divide(vectors, length, out=np.zeros_like(vectors), where=length > 0)


def _smooth_normals(positions: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    p0, p1, p2 = (positions[corner] for corner in triangles.T)
    face_normals = _normalize(np.cross(p1 - p0, p2 - p0))
    sums: dict[tuple[float, ...], np.ndarray] = {}
    for triangle, normal in zip(triangles, face_normals):
        for index in triangle:
            key = tuple(positions[index])
            sums[key] = sums.get(key, np.zeros(3)) + normal
    return _normalize(np.array([sums[tuple(p)] for p in positions]))


def _tangent_space(positions, normals, uvs, triangles):
    p0, p1, p2 = (positions[corner] for corner in triangles.T)
    t0, t1, t2 = (uvs[corner] for corner in triangles.T)
    e1, e2 = p1 - p0, p2 - p0
    d1, d2 = t1 - t0, t2 - t0
    det = d1[:, 0] * d2[:, 1] - d2[:, 0] * d1[:, 1]
    r = np.divide(1.0, det, out=np.zeros_like(det), where=np.abs(det) > 1e-12)[:, None]
    face_tangents = (e1 * d2[:, 1:2] - e2 * d1[:, 1:2]) * r
    face_bitangents = (e2 * d1[:, 0:1] - e1 * d2[:, 0:1]) * r

    tangents = np.zeros_like(positions)
    bitangents = np.zeros_like(positions)
    for corner in triangles.T:
        tangents[corner] = face_tangents
        bitangents[corner] = face_bitangents

    def orthogonal(vectors):
        return _normalize(vectors - normals * np.sum(vectors * normals, axis=1, keepdims=True))

    return orthogonal(tangents), orthogonal(bitangents)


class _MeshBuilder:
    def __init__(self, name: str, material: str | None):
        self.name = name
        self.material = material
        self.positions: list = []
        self.tex_coords: list = []
        self.normals: list = []
        self.indices: list[int] = []

    def add_face(self, corners):
        base = len(self.positions)
        for position, uv, normal in corners:
            self.positions.append(position)
            self.tex_coords.append(uv)
            self.normals.append(normal)
        self.indices.extend(
            index
            for k in range(1, len(corners) - 1)
            for index in (base, base + k, base + k + 1)
        )

    def build(self) -> MeshData:
        positions = np.array(self.positions, dtype=float)
        triangles = np.array(self.indices, dtype=int).reshape(-1, 3)
        if all(n is not None for n in self.normals):
            normals = np.array(self.normals, dtype=float)
        else:
            normals = _smooth_normals(positions, triangles)
        data = MeshData(
            name=self.name,
            material=self.material,
            positions=_tuples(positions),
            normals=_tuples(normals),
            indices=list(self.indices),
        )
        if all(uv is not None for uv in self.tex_coords):
            uvs = np.array(self.tex_coords, dtype=float)
            tangents, bitangents = _tangent_space(positions, normals, uvs, triangles)
            flipped = uvs.copy()
            flipped[:, 1] = 1.0 - flipped[:, 1]
            data.tex_coords = _tuples(flipped)
            data.tangents = _tuples(tangents)
            data.bitangents = _tuples(bitangents)
        return data


def _numbers(args, count, minimum) -> tuple[float, ...]:
    if len(args) < minimum:
        raise ValueError(f"expected at least {minimum} numbers, got {len(args)}")
    values = [float(a) for a in args[:count]]
    values.extend([0.0] * (count - len(values)))
    return tuple(values)


def _resolve(token: str, items: list, kind: str):
    number = int(token)
    if number > 0:
        index = number - 1
    elif number < 0:
        index = len(items) + number
    else:
        raise ValueError(f"{kind} index 0 is not allowed")
    if not 0 <= index < len(items):
        raise ValueError(f"{kind} index {number} out of range")
    return items[index]


def _corner(token: str, positions, tex_coords, normals):
    parts = token.split("/")
    position = _resolve(parts[0], positions, "vertex")
    uv = _resolve(parts[1], tex_coords, "texture") if len(parts) > 1 and parts[1] else None
    normal = _resolve(parts[2], normals, "normal") if len(parts) > 2 and parts[2] else None
    return position, uv, normal


def _read(path: Path) -> str:
    try:
        return path.read_text()
    except OSError as exc:
        raise ModelLoadError(f"cannot read {path}: {exc}") from exc


def parse_obj(path) -> ObjScene:
    """Read a Wavefront OBJ file into triangulated meshes, one per object or material run."""
    path = Path(path)
    text = _read(path)
    positions: list = []
    tex_coords: list = []
    normals: list = []
    builders: list[_MeshBuilder] = []
    libraries: list[Path] = []
    current: _MeshBuilder | None = None
    name = path.stem
    material: str | None = None

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        keyword, *args = line.split()
        try:
            if keyword == "v":
                positions.append(_numbers(args, 3, 3))
            elif keyword == "vt":
                tex_coords.append(_numbers(args, 2, 1))
            elif keyword == "vn":
                normals.append(_numbers(args, 3, 3))
            elif keyword == "f":
                corners = [_corner(t, positions, tex_coords, normals) for t in args]
                if len(corners) < 3:
                    continue
                if current is None:
                    current = _MeshBuilder(name, material)
                    builders.append(current)
                current.add_face(corners)
            elif keyword in ("o", "g"):
                name = " ".join(args) or path.stem
                current = None
            elif keyword == "usemtl":
                material = " ".join(args) or None
                current = None
            elif keyword == "mtllib":
                libraries.extend(path.parent / library for library in args)
        except ValueError as exc:
            raise ModelLoadError(f"{path}:{line_no}: {exc}") from exc

    if not builders:
        raise ModelLoadError(f"{path}: no faces")
    return ObjScene([builder.build() for builder in builders], libraries)


def parse_mtl(path) -> dict[str, Material]:
    """Read a material library into materials keyed by name."""
    path = Path(path)
    text = _read(path)
    materials: dict[str, Material] = {}
    current: Material | None = None
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        keyword, *args = line.split()
        lowered = keyword.lower()
        if lowered == "newmtl":
            current = Material(" ".join(args))
            materials[current.name] = current
        elif current is None:
            continue
        elif lowered == "kd":
            try:
                current.diffuse = _numbers(args, 3, 3)
            except ValueError as exc:
                raise ModelLoadError(f"{path}:{line_no}: {exc}") from exc
        elif lowered in _MTL_TEXTURE_KEYS and args:
            # Options such as "-bm 1.0" come first; the file name is last.
            current.textures.setdefault(_MTL_TEXTURE_KEYS[lowered], []).append(args[-1])
    return materials


@dataclass
class _Pixels:
    width: int
    height: int
    mode: str
    data: bytes


def _load_image(filename: str) -> _Pixels:
    from PIL import Image

    with Image.open(filename) as image:
        image = image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
        if image.mode not in ("L", "RGB", "RGBA"):
            image = image.convert("RGBA")
        return _Pixels(image.width, image.height, image.mode, image.tobytes())


class ResourceManager:
    """Caches loaded models, textures and shaders by directory or path."""

    _instance: ClassVar[ResourceManager | None] = None

    def __init__(self):
        self.model_map: dict[str, Model] = {}
        self.texture_map: dict[str, Texture] = {}
        self.shader_map: dict[str, int] = {}
        self._shaders: dict[str, object] = {}

    @classmethod
    def get(cls) -> ResourceManager:
        """The shared manager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def process_mesh(self, mesh_data, materials, directory) -> Mesh:
        """Build a Mesh from parsed data, loading its material's textures."""
        material = materials.get(mesh_data.material) or Material("")
        count = len(mesh_data.positions)
        zero = (0.0, 0.0, 0.0)
        normals = mesh_data.normals or [zero] * count
        if mesh_data.tex_coords is not None:
            tangents = mesh_data.tangents or [zero] * count
            bitangents = mesh_data.bitangents or [zero] * count
            vertices = [
                Vertex(position=p, normal=n, tangent=t, bi_tangent=b, tex_coords=uv)
                for p, n, uv, t, b in zip(
                    mesh_data.positions, normals, mesh_data.tex_coords, tangents, bitangents
                )
            ]
        else:
            vertices = [Vertex(position=p, normal=n) for p, n in zip(mesh_data.positions, normals)]

        textures = [
            texture
            for kind in TEXTURE_KINDS
            for texture in self.load_material_textures(material, kind, directory)
        ]
        mesh = Mesh(vertices, mesh_data.indices, textures)
        mesh.diffuse = np.array(material.diffuse, dtype=float)
        return mesh

    def model_loaded(self, directory) -> bool:
        return directory in self.model_map

    def add_model(self, model, directory):
        """Remember a model; an existing entry for the directory is kept."""
        self.model_map.setdefault(directory, model)

    def existing_meshes(self, directory) -> list[Mesh]:
        return list(self.model_map[directory].meshes)

    def load_material_textures(self, material, type_name, directory) -> list[Texture]:
        """Load the material's textures of one kind; none once the directory has a texture."""
        textures = []
        for path in material.textures.get(type_name, []):
            if directory in self.texture_map:
                continue
            texture = Texture(self.texture_from_file(path, directory), type_name, path)
            textures.append(texture)
            self.texture_map.setdefault(directory, texture)
        return textures

    def texture_from_file(self, path, directory) -> int:
        """Upload an image file as a mipmapped 2D texture and return its id."""
        from pyglet import gl

        filename = f"{directory}/{path}"
        texture_id = gl.GLuint()
        gl.glGenTextures(1, texture_id)
        try:
            pixels = _load_image(filename)
        except OSError:
            log.warning("Texture failed to load at path: %s", path)
            return texture_id.value

        fmt = {"L": gl.GL_RED, "RGB": gl.GL_RGB, "RGBA": gl.GL_RGBA}[pixels.mode]
        gl.glBindTexture(gl.GL_TEXTURE_2D, texture_id)
        gl.glPixelStorei(gl.GL_UNPACK_ALIGNMENT, 1)
        gl.glTexImage2D(
            gl.GL_TEXTURE_2D,
            0,
            fmt,
            pixels.width,
            pixels.height,
            0,
            fmt,
            gl.GL_UNSIGNED_BYTE,
            pixels.data,
        )
        gl.glGenerateMipmap(gl.GL_TEXTURE_2D)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_WRAP_S, gl.GL_REPEAT)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_WRAP_T, gl.GL_REPEAT)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MIN_FILTER, gl.GL_LINEAR_MIPMAP_LINEAR)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MAG_FILTER, gl.GL_NEAREST)
        return texture_id.value

    def load_shader(self, shader_path, shader_type) -> int:
        """Compile one shader stage from a file and return its id."""
        source = read_shader_source(shader_path)
        shader = compile_shader(source, shader_type, str(shader_path))
        self._shaders.setdefault(str(shader_path), shader)
        self.shader_map.setdefault(str(shader_path), shader.id)
        return shader.id


class Model:
    """All meshes of one model file; a directory is loaded only once."""

    def __init__(self, path, gamma=False, resources=None):
        self.resources = resources if resources is not None else ResourceManager.get()
        path = str(path)
        self.gamma_correction = gamma
        self.textures_loaded: list[Texture] = []
        self.meshes: list[Mesh] = []
        cut = path.rfind("/")
        self.directory = path if cut < 0 else path[:cut]
        if self.resources.model_loaded(self.directory):
            log.warning("Existing model at %s", path)
        else:
            self._load(path)

    def _load(self, path):
        scene = parse_obj(path)
        materials: dict[str, Material] = {}
        for library in scene.material_libraries:
            try:
                materials.update(parse_mtl(library))
            except ModelLoadError as exc:
                log.warning("%s", exc)
        self.meshes = [
            self.resources.process_mesh(mesh_data, materials, self.directory)
            for mesh_data in scene.meshes
        ]
        self.resources.add_model(self, self.directory)

    def draw(self, shader):
        for mesh in self.meshes:
            mesh.draw(shader)