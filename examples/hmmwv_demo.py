"""
Example: HMMWV-like Vehicle on a Fixed Chassis

This example builds a complete vehicle from the HMMWV presets and walks
through the per-step workflow:

1. Create a scene and a vehicle, and initialize it at a chassis pose
2. Sweep the steering input and re-assemble the suspensions
3. Apply throttle and watch the driveline spin up the rear wheels
4. Apply the brakes and stop the wheels
5. Print the shock and constraint diagnostics

The chassis is fixed to ground so the example runs without tire or terrain
models; tire forces are zero.
"""

import sys

import numpy as np
import matplotlib.pyplot as plt

from pyvehicle import DebugFlags, Scene, TireForce, Vehicle, WheelId
from pyvehicle.presets import hmmwv_solid_axle_vehicle


def zero_tire_forces():
    return [TireForce() for _ in WheelId]


def toe_angle(vehicle, which):
    """Heading of the wheel spin axis in the ground plane (deg)."""
    axis = vehicle.get_wheel_rot(which).apply([0.0, 1.0, 0.0])
    return np.degrees(np.arctan2(-axis[0], axis[1]))


def build_vehicle():
    """Create the scene and the vehicle."""
    print("=" * 70)
    print("BUILDING VEHICLE")
    print("=" * 70)

    scene = Scene("hmmwv")
    vehicle = Vehicle(scene, hmmwv_solid_axle_vehicle(), fixed=True)
    vehicle.initialize([0.0, 0.0, 1.0])

    print(f"\n   {vehicle}")
    print(f"   {scene}")
    vehicle.log_hardpoint_locations(sys.stdout)
    return scene, vehicle


def steering_sweep(scene, vehicle):
    """Re-assemble the suspensions over the steering range."""
    print("\n" + "=" * 70)
    print("STEERING SWEEP")
    print("=" * 70)

    results = {'steering': [], 'left': [], 'right': []}
    for steering in np.linspace(-1.0, 1.0, 21):
        vehicle.update(0.0, 0.0, steering, 0.0, zero_tire_forces())
        assembly = scene.assemble()
        results['steering'].append(steering)
        results['left'].append(toe_angle(vehicle, WheelId.FRONT_LEFT))
        results['right'].append(toe_angle(vehicle, WheelId.FRONT_RIGHT))
        print(f"   steering {steering:+.2f}: left {results['left'][-1]:+7.3f} deg, "
              f"right {results['right'][-1]:+7.3f} deg  {assembly}")

    vehicle.update(0.0, 0.0, 0.0, 0.0, zero_tire_forces())
    scene.assemble()
    return results


def drive_and_brake(scene, vehicle, dt=1e-3):
    """Spin up the rear wheels, then brake them to a stop."""
    print("\n" + "=" * 70)
    print("THROTTLE AND BRAKE")
    print("=" * 70)

    for step in range(200):
        vehicle.update(scene.time, 0.2, 0.0, 0.0, zero_tire_forces())
        scene.do_step(dt)
        if step % 50 == 0:
            print(f"   t={scene.time:.3f} s  driveshaft {vehicle.get_driveshaft_speed():8.3f} rad/s  "
                  f"rear wheel torque {vehicle.get_wheel_torque(WheelId.REAR_LEFT):9.2f} N*m  "
                  f"omega {vehicle.get_wheel_omega(WheelId.REAR_LEFT):8.3f} rad/s")

    for step in range(200):
        vehicle.update(scene.time, 0.0, 0.0, 1.0, zero_tire_forces())
        scene.do_step(dt)
        if abs(vehicle.get_wheel_omega(WheelId.REAR_LEFT)) < 1e-9:
            print(f"   ✓ Rear wheels stopped at t={scene.time:.3f} s")
            break


def plot_results(results):
    """Plot the front wheel steer angles against the steering input."""
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.plot(results['steering'], results['left'], 'b-', linewidth=2, label='Front left')
    ax.plot(results['steering'], results['right'], 'r--', linewidth=2, label='Front right')
    ax.set_xlabel('Steering input', fontsize=12)
    ax.set_ylabel('Toe angle (deg)', fontsize=12)
    ax.set_title('Steer Angle vs Steering Input', fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)
    ax.legend()

    plt.tight_layout()
    plt.savefig('hmmwv_steering.png', dpi=150)
    print("   ✓ Saved plot to hmmwv_steering.png")


def main():
    scene, vehicle = build_vehicle()
    results = steering_sweep(scene, vehicle)
    drive_and_brake(scene, vehicle)

    print("\n" + "=" * 70)
    print("DIAGNOSTICS")
    print("=" * 70)
    vehicle.debug_log(DebugFlags.SHOCKS | DebugFlags.CONSTRAINTS, sys.stdout)

    try:
        plot_results(results)
    except Exception as e:
        print(f"\n   Note: Could not create plots ({e})")

    vehicle.destroy()
    print("\n" + "=" * 70)
    print("✓ EXAMPLE COMPLETE!")
    print("=" * 70)


if __name__ == "__main__":
    main()
