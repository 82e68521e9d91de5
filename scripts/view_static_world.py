# scripts/view_static_world.py
import matplotlib.pyplot as plt
from navsim.map_grid import make_demo_world
from navsim.sim_loop import ScenePolicy, plan_scene
from navsim.viz.draw import draw_grid, draw_path

def main():
    scene = ScenePolicy()
    grid, path = plan_scene(make_demo_world(), scene)

    fig, ax = plt.subplots()
    draw_grid(ax, grid, x_offset=scene.x_offset, z_offset=scene.z_offset)
    draw_path(ax, path)
    plt.title("Grid + A* path")
    plt.show()

if __name__ == "__main__":
    main()
