import numpy as np
from numba import njit
from tracer.accelerator import AccelerationStructure, EMPTY_BOUNDS, EMPTY_RESOLUTION, EMPTY_INDICES
from tracer.constants import MAX_MEMBERS, MAX_DEPTH, INF, NEG_INF, Accelerator
from tracer.errors import InvalidArgument
from tracer.utils import timed, get_logger

logger = get_logger('bvh')

SPLIT_METHODS = ('sah', 'median')


class TreeBox:
    def __init__(self, members, mins, maxes, depth=0):
        self.left = None
        self.right = None
        self.axis = 0
        self.depth = depth

        # members are indices into the primitive group
        self.members = members
        self.min = np.min(mins[members], axis=0) if len(members) else INF
        self.max = np.max(maxes[members], axis=0) if len(members) else NEG_INF

    @property
    def split_axis(self):
        return int(np.argmax(self.max - self.min))


@njit
def surface_areas(mins, maxes):
    spans = maxes - mins
    return 2 * (
        spans[:, 0] * spans[:, 1]
        + spans[:, 1] * spans[:, 2]
        + spans[:, 2] * spans[:, 0]
    )


def object_split(box: TreeBox, mins, maxes, centroids, split_method='sah'):
    axis = box.split_axis
    axis_sorted = box.members[np.argsort(centroids[box.members, axis], kind='stable')]
    n = len(axis_sorted)

    if split_method == 'median':
        i = n // 2
    else:
        ltr_maxes = np.maximum.accumulate(maxes[axis_sorted])
        ltr_mins = np.minimum.accumulate(mins[axis_sorted])
        rtl_maxes = np.maximum.accumulate(maxes[axis_sorted[::-1]])[::-1]
        rtl_mins = np.minimum.accumulate(mins[axis_sorted[::-1]])[::-1]

        # candidate k puts the first k primitives on the left, k in [1, n - 1]
        left_surface_areas = surface_areas(ltr_mins, ltr_maxes)[:-1]
        right_surface_areas = surface_areas(rtl_mins, rtl_maxes)[1:]
        left_counts = np.arange(1, n)
        sah = left_surface_areas * left_counts + right_surface_areas * (n - left_counts)
        i = int(np.argmin(sah)) + 1

    left = TreeBox(axis_sorted[:i], mins, maxes, box.depth + 1)
    right = TreeBox(axis_sorted[i:], mins, maxes, box.depth + 1)
    assert len(left.members) + len(right.members) == n
    return axis, left, right


def construct_BVH(root_box: TreeBox, mins, maxes, leaf_size=MAX_MEMBERS, split_method='sah'):
    centroids = (mins + maxes) / 2
    max_depth = 0
    stack = [root_box]
    while stack:
        box = stack.pop()
        max_depth = max(max_depth, box.depth)
        if len(box.members) <= leaf_size or box.depth >= MAX_DEPTH:
            continue

        box.axis, l, r = object_split(box, mins, maxes, centroids, split_method)
        box.right = r
        box.left = l
        stack.append(r)
        stack.append(l)
    return root_box, max_depth


def count_boxes(root: TreeBox):
    box_stack = [root]
    count = 0
    while box_stack:
        box = box_stack.pop()
        count += 1
        if box.right is not None:
            box_stack.append(box.right)
        if box.left is not None:
            box_stack.append(box.left)
    return count


def np_flatten_bvh(root: TreeBox):
    box_count = count_boxes(root)
    box_mins = np.zeros((box_count, 3), dtype=np.float64)
    box_maxes = np.zeros((box_count, 3), dtype=np.float64)
    box_lefts = np.zeros(box_count, dtype=np.int64)
    box_rights = np.zeros(box_count, dtype=np.int64)
    box_axes = np.zeros(box_count, dtype=np.int64)

    member_count = len(root.members)
    indices = np.zeros(member_count, dtype=np.int64)

    box_index = 0
    member_index = 0
    box_queue = [root]
    while box_queue:
        box = box_queue.pop(0)

        box_mins[box_index] = box.min
        box_maxes[box_index] = box.max
        box_axes[box_index] = box.axis

        if box.right is not None and box.left is not None:
            # if inner node (non-leaf), left is an index in the flat arrays
            box_lefts[box_index] = box_index + len(box_queue) + 1
            # right will always be at left + 1, so use right as inner-vs-leaf flag
            box_rights[box_index] = 0
            box_queue.append(box.left)
            box_queue.append(box.right)
        elif box.right is not None or box.left is not None:
            raise ValueError("Box has only one child")
        else:
            l = member_index
            r = member_index + len(box.members)
            box_lefts[box_index] = l
            box_rights[box_index] = r
            indices[l:r] = box.members
            member_index = r

        box_index += 1

    assert box_index == box_count
    assert member_index == member_count

    return box_mins, box_maxes, box_lefts, box_rights, box_axes, indices


class BoundingVolumeHierarchy(AccelerationStructure):
    kind = Accelerator.BVH

    def __init__(self, group, box_mins, box_maxes, box_lefts, box_rights, box_axes, indices, depth=0):
        super().__init__(group)
        self.box_mins = box_mins
        self.box_maxes = box_maxes
        self.box_lefts = box_lefts
        self.box_rights = box_rights
        self.box_axes = box_axes
        self.indices = indices
        self.depth = depth

    @classmethod
    @timed
    def from_group(cls, group, leaf_size=MAX_MEMBERS, split_method='sah'):
        if split_method not in SPLIT_METHODS:
            raise InvalidArgument("unknown split method %r, expected one of %s" % (split_method, SPLIT_METHODS))
        if leaf_size < 1:
            raise InvalidArgument("leaf size must be at least 1, got %r" % leaf_size)

        valid = group.valid
        if not len(valid):
            logger.info("empty scene, BVH has no boxes")
            empty = np.zeros((0, 3), dtype=np.float64)
            return cls(group, empty, empty.copy(), EMPTY_INDICES, EMPTY_INDICES, EMPTY_INDICES, EMPTY_INDICES)

        root = TreeBox(valid, group.mins, group.maxes)
        root, depth = construct_BVH(root, group.mins, group.maxes, leaf_size, split_method)
        arrays = np_flatten_bvh(root)
        logger.info("built BVH over %d primitives: %d boxes, depth %d", len(valid), len(arrays[0]), depth)
        return cls(group, *arrays, depth=depth)

    def __iter__(self):
        # (min, max, left, right, axis) per flat node, root first
        return zip(self.box_mins, self.box_maxes, self.box_lefts, self.box_rights, self.box_axes)

    @property
    def kernel_args(self):
        return (int(self.kind), self.box_mins, self.box_maxes, self.box_lefts, self.box_rights, self.box_axes,
                EMPTY_BOUNDS, EMPTY_RESOLUTION, EMPTY_INDICES, self.indices)
