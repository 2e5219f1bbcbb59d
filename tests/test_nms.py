import unittest

import numpy as np

from profile_kit.nms import NMSConfig, iou, nms, suppress
from profile_kit.types import Box, Detection


def _det(x, y, w, h, conf, cls=0) -> Detection:
    return Detection(box=Box(x=x, y=y, width=float(w), height=float(h)), class_id=cls, confidence=conf)


class TestIou(unittest.TestCase):
    def test_partial_overlap(self) -> None:
        # 75x100 overlap, union 12500
        self.assertAlmostEqual(iou(Box(0, 0, 100.0, 100.0), Box(25, 0, 100.0, 100.0)), 0.6)

    def test_disjoint_and_touching(self) -> None:
        self.assertEqual(iou(Box(0, 0, 10.0, 10.0), Box(20, 20, 10.0, 10.0)), 0.0)
        self.assertEqual(iou(Box(0, 0, 10.0, 10.0), Box(10, 0, 10.0, 10.0)), 0.0)

    def test_zero_area_box(self) -> None:
        self.assertEqual(iou(Box(0, 0, 10.0, 10.0), Box(5, 5, 0.0, 0.0)), 0.0)

    def test_inverted_box(self) -> None:
        self.assertEqual(iou(Box(0, 0, 10.0, 10.0), Box(5, 5, -3.0, 4.0)), 0.0)

    def test_unclipped_boxes_use_full_extent(self) -> None:
        # Both boxes start left of the image; IoU still uses their full size.
        self.assertAlmostEqual(iou(Box(-50, 0, 100.0, 100.0), Box(-50, 0, 50.0, 100.0)), 0.5)


class TestNmsArrays(unittest.TestCase):
    def test_empty(self) -> None:
        keep = nms(np.zeros((0, 4)), np.zeros((0,)), NMSConfig())
        self.assertEqual(keep.shape, (0,))

    def test_keeps_highest_first(self) -> None:
        boxes = np.array([[0, 0, 10, 10], [50, 50, 60, 60], [1, 1, 10, 10]], dtype=np.float64)
        scores = np.array([0.6, 0.7, 0.9])
        keep = nms(boxes, scores, NMSConfig(iou_threshold=0.4))
        self.assertEqual(keep.tolist(), [2, 1])

    def test_equal_scores_keep_input_order(self) -> None:
        boxes = np.array([[0, 0, 10, 10], [0, 0, 10, 10]], dtype=np.float64)
        scores = np.array([0.8, 0.8])
        self.assertEqual(nms(boxes, scores, NMSConfig(iou_threshold=0.4)).tolist(), [0])

    def test_iou_equal_to_threshold_survives(self) -> None:
        # IoU exactly 0.5: only strictly greater overlaps are suppressed.
        boxes = np.array([[0, 0, 100, 100], [0, 0, 50, 100]], dtype=np.float64)
        scores = np.array([0.9, 0.8])
        self.assertEqual(nms(boxes, scores, NMSConfig(iou_threshold=0.5)).tolist(), [0, 1])

    def test_max_detections(self) -> None:
        boxes = np.array([[0, 0, 1, 1], [10, 10, 11, 11], [20, 20, 21, 21]], dtype=np.float64)
        scores = np.array([0.9, 0.8, 0.7])
        keep = nms(boxes, scores, NMSConfig(iou_threshold=0.4, max_detections=2))
        self.assertEqual(keep.tolist(), [0, 1])


class TestSuppress(unittest.TestCase):
    def test_empty_input_returns_early(self) -> None:
        self.assertEqual(suppress([], 0.5, 0.4), [])

    def test_same_class_overlap(self) -> None:
        strong = _det(0, 0, 100, 100, 0.9)
        weak = _det(25, 0, 100, 100, 0.6)
        self.assertEqual(suppress([weak, strong], 0.5, 0.4), [strong])

    def test_suppression_ignores_class(self) -> None:
        strong = _det(0, 0, 100, 100, 0.8, cls=0)
        weak = _det(0, 0, 50, 100, 0.7, cls=16)
        self.assertEqual(suppress([strong, weak], 0.5, 0.4), [strong])

    def test_threshold_reapplied(self) -> None:
        self.assertEqual(suppress([_det(0, 0, 10, 10, 0.5)], 0.5, 0.4), [])

    def test_survivors_do_not_overlap_beyond_threshold(self) -> None:
        rng = np.random.default_rng(7)
        cands = [
            _det(int(x), int(y), float(w), float(h), float(s), cls=int(c))
            for x, y, w, h, s, c in zip(
                rng.integers(-20, 200, 60),
                rng.integers(-20, 200, 60),
                rng.uniform(5, 80, 60),
                rng.uniform(5, 80, 60),
                rng.uniform(0.3, 1.0, 60),
                rng.integers(0, 3, 60),
            )
        ]
        kept = suppress(cands, 0.5, 0.4)
        self.assertLessEqual(len(kept), len(cands))
        for d in kept:
            self.assertGreater(d.confidence, 0.5)
        for i, a in enumerate(kept):
            for b in kept[i + 1:]:
                self.assertLessEqual(iou(a.box, b.box), 0.4 + 1e-9)


if __name__ == "__main__":
    unittest.main()
