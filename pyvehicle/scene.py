"""
Reference mechanical scene for the vehicle subsystem templates.

The Scene is the collaborator that owns the bookkeeping of the mechanical
system: bodies, joints, force elements, shafts and shaft relations. The
vehicle templates only create items, attach them, and query state. This
implementation provides:

1. Position-level assembly: the non-fixed bodies are moved to the pose of
   minimum displacement that satisfies every joint. The weighted
   least-squares problem

       min  sum_j |r_j(x)|^2 + w^2 * |x|^2

   is solved with scipy.optimize.least_squares, where x holds the position
   and rotation-vector increments of each body.

2. Shaft network dynamics: the 1D shafts with their gear, gearbox and
   planetary relations are solved as a saddle-point (KKT) system

       [ M  -C^T ] [ a      ]   [ tau ]
       [ C   0   ] [ lambda ] = [ b   ]

   giving shaft accelerations and relation reaction torques. Brakes act on
   coupled axle shafts with stick-slip friction.

Rigid-body dynamics (integration of body motion under loads) is left to an
external solver; get_body_loads() gathers the loads such a solver consumes.

Requirements:
    - scipy: For numerical optimization (scipy.optimize)
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from scipy import optimize
from scipy.spatial.transform import Rotation

from .brake import BrakeSimple
from .constraints import Joint
from .rigid_body import Body
from .shafts import Shaft, ShaftRelation, ShaftsGearboxAngled, ShaftBodyCoupling
from .spring_damper import SpringDamper

logger = logging.getLogger(__name__)


@dataclass
class AssemblyResult:
    """
    Results from a position-level assembly.

    Attributes:
        success: Whether the solver converged
        message: Solver status message
        iterations: Number of residual evaluations
        violations: Mapping of joint name -> violation norm after assembly
    """
    success: bool
    message: str
    iterations: int
    violations: Dict[str, float] = field(default_factory=dict)

    def get_max_violation(self) -> Tuple[str, float]:
        """
        Get the largest joint violation.

        Returns:
            Tuple of (joint_name, violation)
        """
        if not self.violations:
            return ("none", 0.0)
        name = max(self.violations, key=self.violations.get)
        return (name, self.violations[name])

    def __repr__(self) -> str:
        status = "✓" if self.success else "✗"
        name, value = self.get_max_violation()
        return (f"AssemblyResult({status}, iterations={self.iterations}, "
                f"max_violation={value:.3e} ({name}))")


class Scene:
    """
    Container and solver for the mechanical items of a simulation.

    Items are attached with add() and released with remove(). Every item can
    belong to a single scene; joints, force elements and relations can only
    be attached once the items they reference are attached.

    Attributes:
        name: Identifier for the scene
        time: Simulation time in s
        max_iterations: Maximum residual evaluations for assembly
        tolerance: Convergence tolerance for assembly
        regularization: Weight of the minimum-displacement term in assembly
    """

    def __init__(self, name: str = "scene"):
        self.name = name
        self.time = 0.0

        self.bodies: List[Body] = []
        self.joints: List[Joint] = []
        self.force_elements: List[SpringDamper] = []
        self.shafts: List[Shaft] = []
        self.shaft_relations: List[ShaftRelation] = []
        self.couplings: List[ShaftBodyCoupling] = []
        self.brakes: List[BrakeSimple] = []

        # Solver settings
        self.max_iterations = 2000
        self.tolerance = 1e-12
        self.regularization = 1e-3

    def _collection(self, item: object) -> list:
        if isinstance(item, Body):
            return self.bodies
        if isinstance(item, Joint):
            return self.joints
        if isinstance(item, SpringDamper):
            return self.force_elements
        if isinstance(item, Shaft):
            return self.shafts
        if isinstance(item, ShaftRelation):
            return self.shaft_relations
        if isinstance(item, ShaftBodyCoupling):
            return self.couplings
        if isinstance(item, BrakeSimple):
            return self.brakes
        raise TypeError(f"Cannot attach object of type {type(item).__name__} to a scene")

    def _references(self, item: object) -> list:
        if isinstance(item, (Joint, SpringDamper)):
            return [item.body1, item.body2]
        if isinstance(item, ShaftsGearboxAngled):
            return list(item.shafts) + [item.truss]
        if isinstance(item, ShaftRelation):
            return list(item.shafts)
        if isinstance(item, ShaftBodyCoupling):
            return [item.shaft, item.body]
        if isinstance(item, BrakeSimple):
            return [item.revolute]
        return []

    def add(self, item: object) -> None:
        """
        Attach an item to the scene.

        Args:
            item: Body, Joint, SpringDamper, Shaft, ShaftRelation, ShaftBodyCoupling or BrakeSimple

        Raises:
            TypeError: If the item type is not supported
            RuntimeError: If the item is already attached or references detached items
        """
        collection = self._collection(item)
        if item.scene is not None:
            raise RuntimeError(f"'{item.name}' is already attached to scene '{item.scene.name}'")
        for reference in self._references(item):
            if reference is None or reference.scene is not self:
                ref_name = getattr(reference, 'name', None)
                raise RuntimeError(f"'{item.name}' references '{ref_name}', which is not attached to scene '{self.name}'")
        collection.append(item)
        item.scene = self

    def remove(self, item: object) -> None:
        """
        Detach an item from the scene.

        Raises:
            ValueError: If the item is not attached to this scene
        """
        collection = self._collection(item)
        if item.scene is not self:
            raise ValueError(f"'{item.name}' is not attached to scene '{self.name}'")
        collection.remove(item)
        item.scene = None

    # Assembly

    def compute_constraint_violations(self) -> Dict[str, float]:
        """
        Compute the violation norm of each joint.

        Returns:
            Dictionary mapping joint name to violation norm
        """
        return {joint.name: joint.get_physical_error() for joint in self.joints}

    def assemble(self) -> AssemblyResult:
        """
        Move the non-fixed bodies to the closest pose satisfying all joints.

        Returns:
            AssemblyResult with convergence info and joint violations
        """
        movable = [body for body in self.bodies if not body.fixed]
        if not self.joints or not movable:
            return AssemblyResult(success=True,
                                  message="Nothing to assemble",
                                  iterations=0,
                                  violations=self.compute_constraint_violations())

        start = [(body.get_position(), body.get_rotation()) for body in movable]

        def apply(x: np.ndarray) -> None:
            for i, (body, (position, rotation)) in enumerate(zip(movable, start)):
                body.set_position(position + x[6 * i:6 * i + 3])
                body.set_rotation(Rotation.from_rotvec(x[6 * i + 3:6 * i + 6]) * rotation)

        def residual_function(x: np.ndarray) -> np.ndarray:
            apply(x)
            residuals = [joint.evaluate() for joint in self.joints]
            residuals.append(self.regularization * x)
            return np.concatenate(residuals)

        result = optimize.least_squares(
            residual_function,
            np.zeros(6 * len(movable)),
            method='trf',
            max_nfev=self.max_iterations,
            ftol=self.tolerance,
            xtol=self.tolerance,
            gtol=self.tolerance
        )

        apply(result.x)

        assembly = AssemblyResult(success=bool(result.success),
                                  message=str(result.message),
                                  iterations=int(result.nfev),
                                  violations=self.compute_constraint_violations())
        logger.debug("Scene '%s' assembly: %s", self.name, assembly)
        return assembly

    # Shaft network

    def _coupled_shaft(self, body: Body) -> Optional[Shaft]:
        for coupling in self.couplings:
            if coupling.body is body:
                return coupling.shaft
        return None

    def _braked_shaft(self, brake: BrakeSimple) -> Optional[Shaft]:
        shaft = self._coupled_shaft(brake.revolute.body2)
        if shaft is None:
            shaft = self._coupled_shaft(brake.revolute.body1)
        return shaft

    @staticmethod
    def _solve_kkt(inertias: np.ndarray, torques: np.ndarray,
                   rows: List[np.ndarray], rhs: List[float]) -> Tuple[np.ndarray, np.ndarray]:
        n = len(inertias)
        if not rows:
            return torques / inertias, np.zeros(0)
        C = np.array(rows)
        m = C.shape[0]
        K = np.zeros((n + m, n + m))
        K[:n, :n] = np.diag(inertias)
        K[:n, n:] = -C.T
        K[n:, :n] = C
        solution = np.linalg.solve(K, np.concatenate([torques, rhs]))
        return solution[:n], solution[n:]

    def solve_shafts(self, dt: Optional[float] = None) -> None:
        """
        Solve the shaft network for accelerations and reaction torques.

        Applied torques, torques accumulated on coupled bodies about their
        spin axes, and brake friction are balanced against the relation
        reactions. The inertia of a shaft includes the axial inertia of the
        bodies coupled to it. A braked shaft that can be stopped within `dt` by the
        available brake torque is locked; otherwise it slips at full torque.

        Args:
            dt: Step size used for the stick test (None treats stopped shafts as locked)
        """
        for brake in self.brakes:
            brake.applied_torque = 0.0

        free = [shaft for shaft in self.shafts if not shaft.fixed]
        if not free:
            return
        index = {id(shaft): i for i, shaft in enumerate(free)}
        inertias = np.array([shaft.inertia for shaft in free])
        torques = np.array([shaft.get_applied_torque() for shaft in free])

        # Coupled bodies spin with their shaft
        for coupling in self.couplings:
            if id(coupling.shaft) in index:
                i = index[id(coupling.shaft)]
                axis = coupling.get_axis()
                inertias[i] += coupling.body.get_axial_inertia(axis)
                torques[i] += np.dot(coupling.body.get_applied_torque(), axis)

        rows: List[np.ndarray] = []
        rhs: List[float] = []
        for relation in self.shaft_relations:
            row = np.zeros(len(free))
            for shaft, coefficient in zip(relation.shafts, relation.get_coefficients()):
                if not shaft.fixed:
                    row[index[id(shaft)]] += coefficient
            rows.append(row)
            rhs.append(0.0)

        locks: List[Tuple[BrakeSimple, int, float]] = []
        for brake in self.brakes:
            limit = brake.get_brake_torque()
            shaft = self._braked_shaft(brake)
            if limit <= 0.0 or shaft is None or shaft.fixed:
                continue
            i = index[id(shaft)]
            stoppable = shaft.speed == 0.0 or (dt is not None and abs(shaft.speed) * inertias[i] <= limit * dt)
            if stoppable:
                locks.append((brake, i, limit))
            else:
                brake.applied_torque = -limit * np.sign(shaft.speed)
                torques[i] += brake.applied_torque

        while True:
            lock_rows = []
            lock_rhs = []
            for _, i, _ in locks:
                row = np.zeros(len(free))
                row[i] = 1.0
                lock_rows.append(row)
                lock_rhs.append(-free[i].speed / dt if dt else 0.0)

            accelerations, multipliers = self._solve_kkt(inertias, torques, rows + lock_rows, rhs + lock_rhs)

            slipping = None
            for k, (brake, i, limit) in enumerate(locks):
                if abs(multipliers[len(rows) + k]) > limit:
                    slipping = k
                    break
            if slipping is None:
                break
            brake, i, limit = locks.pop(slipping)
            brake.applied_torque = limit * np.sign(multipliers[len(rows) + slipping])
            torques[i] += brake.applied_torque

        for k, (brake, _, _) in enumerate(locks):
            brake.applied_torque = float(multipliers[len(rows) + k])
        for j, relation in enumerate(self.shaft_relations):
            relation.multiplier = float(multipliers[j])
        for shaft, acceleration in zip(free, accelerations):
            shaft.acceleration = float(acceleration)

    # Time stepping

    def do_step(self, dt: float) -> None:
        """
        Advance the shaft network by one step (semi-implicit Euler).

        Coupled bodies have their spin about the coupling axis set to the
        shaft speed after the step.

        Args:
            dt: Step size in s (must be positive)

        Raises:
            ValueError: If dt is not positive
        """
        if not np.isfinite(dt) or dt <= 0.0:
            raise ValueError(f"Step size must be positive, got {dt}")

        self.solve_shafts(dt)
        for shaft in self.shafts:
            if shaft.fixed:
                continue
            shaft.speed += shaft.acceleration * dt
            shaft.angle += shaft.speed * dt

        for coupling in self.couplings:
            axis = coupling.get_axis()
            omega = coupling.body.get_angular_velocity()
            coupling.body.set_angular_velocity(omega - np.dot(omega, axis) * axis + coupling.shaft.speed * axis)

        self.time += dt

    def get_body_loads(self, body: Body) -> Tuple[np.ndarray, np.ndarray]:
        """
        Gather the loads acting on a body for an external dynamics solver.

        Sums the body accumulators, spring-damper forces, gearbox reaction
        torques on truss bodies, and brake torques on bodies whose spindle
        is not coupled to a shaft.

        Args:
            body: Attached body

        Returns:
            Tuple of (force, torque about the body center of mass), global frame
        """
        if body.scene is not self:
            raise ValueError(f"'{body.name}' is not attached to scene '{self.name}'")
        force = body.get_applied_force()
        center = body.get_com_position()
        # Accumulated torques are about the reference origin
        torque = body.get_applied_torque() - np.cross(center - body.get_position(), force)

        for element in self.force_elements:
            if body is not element.body1 and body is not element.body2:
                continue
            p1, p2 = element.get_endpoints()
            vector = element.get_force_vector()
            if body is element.body2:
                force += vector
                torque += np.cross(p2 - center, vector)
            if body is element.body1:
                force -= vector
                torque -= np.cross(p1 - center, vector)

        for relation in self.shaft_relations:
            if isinstance(relation, ShaftsGearboxAngled) and relation.truss is body:
                torque += relation.get_torque_reaction_on_truss()

        for brake in self.brakes:
            if self._braked_shaft(brake) is not None:
                continue
            joint = brake.revolute
            if body is not joint.body1 and body is not joint.body2:
                continue
            speed = joint.get_relative_angular_speed()
            brake_torque = -brake.get_brake_torque() * np.sign(speed) * joint.get_axis()
            torque += brake_torque if body is joint.body2 else -brake_torque

        return force, torque

    def __repr__(self) -> str:
        return (f"Scene('{self.name}', time={self.time:.4f} s, "
                f"bodies={len(self.bodies)}, joints={len(self.joints)}, "
                f"shafts={len(self.shafts)})")
