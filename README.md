# starfighter

A small 3D arcade space shooter built on OpenGL through pyglet. You pilot a
ship inside a spherical world (radius 3000) above a terrain while fifty enemy
ships roam between random points. Any enemy that comes within 1000 units of
you turns and heads for you. Shots that touch an enemy destroy it.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Playing

Start the game from the directory that holds the `Assets/` and `Shaders/`
folders:

```
starfighter
```

To show only the main-menu view, a still camera over the sky and the ground:

```
starfighter --menu
```

The command returns a non-zero exit status when a window cannot be opened or
a model or shader cannot be loaded.

The assets are not part of the package. The game looks for these files,
relative to the working directory:

- `Assets/Geometry/Ship/ship.obj`
- `Assets/Geometry/Projectile/Projectile.obj`
- `Assets/Geometry/EnemyShip/enemy_ship.obj`
- `Assets/Geometry/Ground/ground.obj`
- `Assets/Geometry/SkySphere/SkySphere.obj`
- `Shaders/Vertex/vertex.glsl`
- `Shaders/Fragment/fragment.glsl`
- `Shaders/Fragment/sky_fragment.glsl`

Models are Wavefront OBJ files. Their `mtllib` material libraries can give a
diffuse colour (`Kd`) and texture maps (`map_Kd`, `map_Ks`, `norm`/`map_Kn`,
`map_bump`/`bump`). Pillow reads the texture images. The shaders receive
`model`, `view`, `projection`, `view_pos` and `diffuse` uniforms, plus
samplers named `texture_diffuse1`, `texture_specular1` and so on. The vertex
attributes are bound at locations 0–4: position, normal, texture coordinates,
tangent and bi-tangent.

Controls:

| Input             | Action                                 |
|-------------------|----------------------------------------|
| Mouse             | Pitch and yaw the ship                 |
| `W` / `S`         | Speed up / slow down                   |
| `A` / `D`         | Roll left / right                      |
| Left mouse button | Fire; the two guns take turns          |
| `Esc`             | Quit                                   |

- Going faster makes the ship turn more slowly.
- After a shot, the weapon needs a short cooldown before it fires again.
- Flying into the terrain pushes the ship up and pitches it away.
- Reaching the edge of the world sphere reverses the ship's direction of travel.

## What the game does not do

The game does not track lives or a score, and it does not end when enemies
reach you or when all of them are destroyed. It runs until you press `Esc` or
close the window. The menu scene only shows the view; it has no menu items and
takes no input.

## Using the pieces

You can also use the engine parts on their own:

- `starfighter.camera`: `Quat`, `Camera`, `translate` and `perspective`, for
  quaternion-based free-flight cameras and view and projection matrices.
- `starfighter.actor`: `Actor`, the `BehaviourState` base class and
  `BehaviourStateMachine`.
- `starfighter.collision`: `check_spheres`, `check_world_sphere` and
  `check_terrain`. `check_terrain` returns a `(hit, velocity)` pair.
- `starfighter.mesh`: `Vertex`, `Texture` and `Mesh`.
- `starfighter.shader`: `Shader`, `read_shader_source`, `compile_shader` and
  `ShaderError`.
- `starfighter.resources`: `parse_obj`, `parse_mtl`, `ResourceManager`,
  `Model` and `ModelLoadError`, for loading meshes, materials and textures.
  A model directory is loaded only once.
- `starfighter.actors`: `EnemyManager` (accepts a `seed` for repeatable
  randomness), `EnemyActor`, `PlayerActor`, `PlayerProjectile` and
  `RandomWayPointBehaviour`.
- `starfighter.scene` and `starfighter.scenes`: `Scene`, `SceneManager`,
  `SceneError`, `GameScene` and `MenuScene`.

Example:

```python
from starfighter.camera import Camera
from starfighter.collision import check_spheres

camera = Camera()
camera.yaw(90.0)
camera.move_forward(5.0)
print(camera.position, camera.forward)

print(check_spheres((0, 0, 0), 1.0, (1.5, 0, 0), 1.0))  # True
```

Only the scenes, meshes, shaders and texture loading need an OpenGL context.
The camera, collision, OBJ/MTL parsing and actor logic work without a window.