"""
Path discretization: the sampler's hot path.

Sampler.compute(t) evaluates the current path at t, runs one batched
kinematics update on the shared model, and publishes:

  - <prefix>position / velocity / acceleration: reduced joint vectors
    (with a 6-coordinate floating-base prefix when the selection has one)
  - <prefix>op_frame/<name>, velocity/op_frame/<name>: registered frames
  - <prefix>com/<name>, velocity/com/<name>: registered centers of mass

Concurrency: one lock guards compute(), set_path() and
deactivate_publishing(). Registration calls (add_operational_frame,
add_center_of_mass, set_joint_names, activate_publishing) are expected to
come from a single control thread and must not race with compute().
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

import numpy as np

from pathsampler import config as cfg
from pathsampler.config import TRACE
from pathsampler.model.base import CenterOfMassComputation, KinematicModel
from pathsampler.path.base import Path
from pathsampler.publishing.base import (
    QuaternionMsg,
    Sink,
    TransformMsg,
    Transport,
    Vector3Msg,
    VectorMsg,
    make_node_name,
)
from pathsampler.publishing.inprocess import InProcessTransport
from pathsampler.sampler.index_view import IndexView
from pathsampler.sampler.registry import TargetRegistry
from pathsampler.sampler.targets import (
    CenterOfMassTarget,
    ComputationOption,
    FrameTarget,
)
from pathsampler.utils.errors import (
    EvaluationFailedError,
    NotInitializedError,
    NotReadyError,
)
from pathsampler.utils.se3_utils import se3_euler_zyx, se3_quaternion, se3_translation

logger = logging.getLogger(__name__)

TransportFactory = Callable[[str], Transport]

# Size of the floating-base prefix of the aggregate vectors
FREEFLYER_SIZE = 6


class Sampler:
    """
    Periodic trajectory sampler publishing joint, frame and COM quantities.

    Args:
        model: Shared kinematic model. Fixed for the sampler's lifetime.
        transport_factory: Called with the node name on activate_publishing().
        topic_prefix: Prefix of every sink address (default cfg.TOPIC_PREFIX).
        queue_size: Queue size requested when advertising sinks.
    """

    def __init__(
        self,
        model: KinematicModel,
        transport_factory: TransportFactory = InProcessTransport,
        topic_prefix: str | None = None,
        queue_size: int = cfg.QUEUE_SIZE,
    ) -> None:
        self._lock = threading.Lock()
        self._model = model
        self._path: Path | None = None

        self._transport_factory = transport_factory
        self._transport: Transport | None = None
        self.topic_prefix = cfg.TOPIC_PREFIX if topic_prefix is None else topic_prefix
        self.queue_size = queue_size
        self._pub_q: Sink | None = None
        self._pub_v: Sink | None = None
        self._pub_a: Sink | None = None

        self._registry = TargetRegistry()

        self._q_view = IndexView().finalize()
        self._v_view = IndexView().finalize()
        self._has_freeflyer = False
        self._freeflyer_joint: int | None = None

        # Scratch buffers, resized on demand in compute()
        self._q = np.zeros(0, dtype=np.float64)
        self._v = np.zeros(0, dtype=np.float64)
        self._a = np.zeros(0, dtype=np.float64)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def model(self) -> KinematicModel:
        return self._model

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def transport(self) -> Transport | None:
        return self._transport

    @property
    def is_publishing(self) -> bool:
        return self._transport is not None

    @property
    def has_freeflyer(self) -> bool:
        return self._has_freeflyer

    @property
    def q_view(self) -> IndexView:
        return self._q_view

    @property
    def v_view(self) -> IndexView:
        return self._v_view

    @property
    def frames(self) -> tuple[FrameTarget, ...]:
        return self._registry.frames

    @property
    def centers_of_mass(self) -> tuple[CenterOfMassTarget, ...]:
        return self._registry.centers_of_mass

    # ------------------------------------------------------------------
    # Path
    # ------------------------------------------------------------------

    def set_path(self, path: Path | None) -> None:
        """Replace the sampled path. Blocks while a compute() is in flight."""
        with self._lock:
            self._path = path
        if path is not None:
            logger.debug("Path set, time range %s", path.time_range)

    # ------------------------------------------------------------------
    # Publishing lifecycle
    # ------------------------------------------------------------------

    def _advertise(self, relative: str) -> Sink:
        assert self._transport is not None
        return self._transport.advertise(
            cfg.topic(relative, self.topic_prefix), self.queue_size
        )

    def _require_publishing(self) -> None:
        if self._transport is None:
            raise NotInitializedError(
                "Publishing is not active; call activate_publishing() first"
            )

    def activate_publishing(self, name: str = "pathsampler", anonymous: bool = False) -> bool:
        """
        Create the transport if needed and (re)advertise the aggregate sinks.

        Returns:
            True if a new transport was created, False if one was already active.
        """
        created = False
        if self._transport is None:
            node_name = make_node_name(name, anonymous)
            self._transport = self._transport_factory(node_name)
            created = True
            logger.info("Publishing activated as '%s' under %s", node_name, self.topic_prefix)

        previous = [self._pub_q, self._pub_v, self._pub_a]
        self._pub_q = self._advertise("position")
        self._pub_v = self._advertise("velocity")
        self._pub_a = self._advertise("acceleration")
        for sink in previous:
            if sink is not None:
                sink.shutdown()
        return created

    def deactivate_publishing(self) -> None:
        """Release every sink and the transport. Waits for a running compute()."""
        if self._transport is None:
            return
        with self._lock:
            if self._transport is None:
                return
            self.reset_topics()
            for sink in (self._pub_q, self._pub_v, self._pub_a):
                if sink is not None:
                    sink.shutdown()
            self._pub_q = self._pub_v = self._pub_a = None
            self._transport.close()
            self._transport = None
        logger.info("Publishing deactivated")

    def reset_topics(self) -> None:
        """Forget every registered frame and center of mass."""
        released = self._registry.clear()
        for sink in released:
            sink.shutdown()
        logger.debug("Registry cleared, %d sinks released", len(released))

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _init_sinks(
        self,
        target: FrameTarget | CenterOfMassTarget,
        position_topic: str,
        derivative_topic: str,
    ) -> None:
        previous = target.sinks()
        target.position_sink = (
            self._advertise(position_topic)
            if target.option & ComputationOption.POSITION
            else None
        )
        target.derivative_sink = (
            self._advertise(derivative_topic)
            if target.option & ComputationOption.DERIVATIVE
            else None
        )
        for sink in previous:
            sink.shutdown()

    def add_operational_frame(self, name: str, option: ComputationOption) -> bool:
        """
        Publish the placement and/or velocity of frame ``name``.

        Registering an already registered frame widens its option.

        Returns:
            False if the model has no such frame, True otherwise.

        Raises:
            NotInitializedError: publishing is not active.
        """
        self._require_publishing()
        if not self._model.exist_frame(name):
            logger.warning("Operational frame '%s' does not exist in the model", name)
            return False

        index = self._model.get_frame_id(name)
        target, created = self._registry.merge_frame(index, option)
        self._init_sinks(target, f"op_frame/{name}", f"velocity/op_frame/{name}")
        logger.info(
            "%s operational frame '%s' (index %d) option=%r",
            "Added" if created else "Updated",
            name,
            index,
            target.option,
        )
        return True

    def add_center_of_mass(
        self, name: str, com: CenterOfMassComputation, option: ComputationOption
    ) -> bool:
        """
        Publish the position and/or velocity of a center-of-mass computation.

        Entries are keyed on the ``com`` object; ``name`` only names the sinks.
        Registering the same handle under another name moves its sinks to the
        new name and merges the option into the single entry.

        Raises:
            NotInitializedError: publishing is not active.
        """
        self._require_publishing()
        target, created = self._registry.merge_center_of_mass(com, option)
        self._init_sinks(target, f"com/{name}", f"velocity/com/{name}")
        logger.info(
            "%s center of mass '%s' option=%r",
            "Added" if created else "Updated",
            name,
            target.option,
        )
        return True

    def set_joint_names(self, names: Iterable[str]) -> None:
        """
        Select the joints whose coordinates make up the aggregate vectors.

        Floating-base joints are not selected through the views; any of them
        turns on the 6-coordinate prefix instead.

        Raises:
            UnknownJointError: a name is not a joint of the model. The previous
                selection is kept in that case.
        """
        q_view = IndexView()
        v_view = IndexView()
        has_freeflyer = False
        freeflyer_joint: int | None = None
        for name in names:
            joint = self._model.get_joint_by_name(name)
            if joint.kind.is_floating_base:
                if has_freeflyer:
                    logger.warning(
                        "Joint '%s' is a second floating base; not stacked", name
                    )
                else:
                    freeflyer_joint = joint.index
                has_freeflyer = True
            else:
                q_view.add_row(joint.rank_in_configuration, joint.config_size)
                v_view.add_row(joint.rank_in_velocity, joint.number_dof)

        self._q_view = q_view.finalize()
        self._v_view = v_view.finalize()
        self._has_freeflyer = has_freeflyer
        self._freeflyer_joint = freeflyer_joint
        logger.info(
            "Joint selection: nq=%d nv=%d freeflyer=%s",
            self._q_view.nb_indices,
            self._v_view.nb_indices,
            has_freeflyer,
        )

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def _resize_buffers(self, nq: int, nv: int) -> None:
        if self._q.shape[0] != nq:
            self._q = np.zeros(nq, dtype=np.float64)
        if self._v.shape[0] != nv:
            self._v = np.zeros(nv, dtype=np.float64)
            self._a = np.zeros(nv, dtype=np.float64)

    def compute(self, time: float) -> None:
        """
        Sample the path at ``time`` and publish every requested quantity.

        Raises:
            NotReadyError: no path is set.
            NotInitializedError: publishing is not active.
            EvaluationFailedError: the path cannot be evaluated at ``time``.
        """
        with self._lock:
            if self._path is None:
                raise NotReadyError("Path is not set")
            self._require_publishing()

            model = self._model
            self._resize_buffers(model.configuration_size(), model.velocity_dimension())

            q, success = self._path.eval(time)
            if not success:
                raise EvaluationFailedError(f"Could not evaluate the path at t={time}")
            self._q[:] = q
            self._v[:] = self._path.derivative(time, 1)
            self._a[:] = self._path.derivative(time, 2)

            model.set_configuration(self._q)
            model.set_velocity(self._v)
            model.compute_frame_kinematics()

            self._publish_joint_vectors()
            self._publish_frames()
            self._publish_centers_of_mass()
            logger.log(
                TRACE,
                "compute t=%.6f frames=%d coms=%d",
                time,
                len(self._registry.frames),
                len(self._registry.centers_of_mass),
            )

    def _publish_joint_vectors(self) -> None:
        assert self._pub_q and self._pub_v and self._pub_a
        prefix = FREEFLYER_SIZE if self._has_freeflyer else 0

        msg = np.zeros(prefix + self._q_view.nb_indices)
        self._q_view.restrict_into(self._q, msg[prefix:])
        if self._has_freeflyer:
            # Root joint position as translation + Z-Y-X Euler angles
            assert self._freeflyer_joint is not None
            oMrj = self._model.joint_placement(self._freeflyer_joint)
            msg[:3] = se3_translation(oMrj)
            msg[3:6] = se3_euler_zyx(oMrj)
        self._pub_q.publish(VectorMsg.from_array(msg))

        # Root joint velocity/acceleration are not derived yet: zero prefix
        msg = np.zeros(prefix + self._v_view.nb_indices)
        self._v_view.restrict_into(self._v, msg[prefix:])
        self._pub_v.publish(VectorMsg.from_array(msg))

        self._v_view.restrict_into(self._a, msg[prefix:])
        self._pub_a.publish(VectorMsg.from_array(msg))

    def _publish_frames(self) -> None:
        for frame in self._registry.frames:
            if frame.option & ComputationOption.POSITION and frame.position_sink:
                oMf = self._model.frame_placement(frame.frame_index)
                x, y, z = se3_translation(oMf).tolist()
                qx, qy, qz, qw = se3_quaternion(oMf).tolist()
                frame.position_sink.publish(
                    TransformMsg(Vector3Msg(x, y, z), QuaternionMsg(qx, qy, qz, qw))
                )
            if frame.option & ComputationOption.DERIVATIVE and frame.derivative_sink:
                velocity = self._model.frame_velocity(frame.frame_index)
                frame.derivative_sink.publish(VectorMsg.from_array(velocity))

    def _publish_centers_of_mass(self) -> None:
        for target in self._registry.centers_of_mass:
            quantities = target.requested_quantities()
            if not quantities:
                continue
            target.com.compute(quantities)
            if target.option & ComputationOption.POSITION and target.position_sink:
                target.position_sink.publish(Vector3Msg.from_array(target.com.position()))
            if target.option & ComputationOption.DERIVATIVE and target.derivative_sink:
                com_velocity = target.com.jacobian() @ self._v
                target.derivative_sink.publish(Vector3Msg.from_array(com_velocity))
