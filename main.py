"""
Roulette console driver, the presentation layer.

Drives RouletteController frame by frame and prints ball state and events.

Usage:
    python main.py                      # random spin
    python main.py --seed 7 --velocity 800
    python main.py --script scripts/fast_spin.py --record spin.csv
"""

import argparse
import sys
import time

from controller import RouletteController


def draw_ball(ctrl: RouletteController) -> None:
    b = ctrl.ball
    print(f"Ball Position: {b.position:.2f}°, Angular Velocity: {b.angular_velocity:.2f}°/s")


def report_event(ev: dict) -> None:
    kind = ev["type"]
    if kind == "drop_started":
        print("[Ball] The ball is dropping into the pockets.")
    elif kind == "collision":
        print(f"[Ball] Collision with fret at angle: {ev['fret_angle']:.2f}°")
    elif kind == "stopped":
        print("[Ball] The ball has stopped.")


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Roulette ball spin simulator")
    p.add_argument("--seed", type=int, default=None, help="random seed for launch speeds")
    p.add_argument("--velocity", type=float, default=None, help="ball launch speed (deg/s)")
    p.add_argument("--wheel-velocity", type=float, default=None, help="wheel head speed (deg/s)")
    p.add_argument("--script", type=str, default=None, help="spin script (.py with SCRIPT)")
    p.add_argument("--config", type=str, default=None, help="JSON config from save_config")
    p.add_argument("--record", type=str, default=None, help="write a CSV of every substep")
    p.add_argument("--fps", type=float, default=0.0,
                   help="frames per second to pace output; 0 runs as fast as possible")
    p.add_argument("--every", type=int, default=10, help="print ball state every N frames")
    p.add_argument("--quiet", action="store_true", help="only print events and the result")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    ctrl = RouletteController(seed=args.seed)

    if args.config and not ctrl.load_config(args.config):
        print(f"[CFG] {ctrl.status_msg}")
        return 1
    if args.record:
        ctrl.start_recording(args.record)

    if args.script:
        if not ctrl.load_script_file(args.script):
            print(f"[Script] {ctrl.status_msg}")
            return 1
    if ctrl.mode != "running":
        ctrl.spin(initial_velocity=args.velocity, wheel_velocity=args.wheel_velocity)
    print(f"[Wheel] {ctrl.status_msg}")

    frame_dt = 1.0 / args.fps if args.fps > 0 else 0.0
    frame = 0
    while ctrl.mode == "running":
        ctrl.step(frame_dt)
        for ev in ctrl.physics_events:
            report_event(ev)
        if not args.quiet and frame % max(1, args.every) == 0:
            draw_ball(ctrl)
        frame += 1
        if frame_dt:
            time.sleep(frame_dt)

    for ev in ctrl.pending_events:
        if ev["type"] == "show_result":
            print(f"[Wheel] Ball rests at {ev['position']:.2f}° → "
                  f"{ev['pocket']} {ev['color']}  "
                  f"({ev['sim_time']:.2f}s, {ev['collisions']} fret hits)")
    ctrl.pending_events.clear()
    return 0


if __name__ == "__main__":
    sys.exit(main())
