import unittest

import numpy as np

from profile_kit.postprocess import YoloPostConfig, YoloPostprocessor, decode
from profile_kit.types import Box


def _row(cx, cy, w, h, *class_scores, obj=1.0):
    return [cx, cy, w, h, obj, *class_scores]


class TestDecode(unittest.TestCase):
    def test_decode_scales_and_truncates(self) -> None:
        # 200x100 image; center (0.5, 0.5), size (0.25, 0.5) -> x = 100 - 25, y = 50 - 25
        p = np.array([_row(0.5, 0.5, 0.25, 0.5, 0.1, 0.9, 0.2)], dtype=np.float32)
        cands = decode([p], 200, 100, 0.5)
        self.assertEqual(len(cands), 1)
        c = cands[0]
        self.assertEqual(c.class_id, 1)
        self.assertAlmostEqual(c.confidence, 0.9, places=6)
        self.assertEqual((c.box.x, c.box.y), (75, 25))
        self.assertAlmostEqual(c.box.width, 50.0, places=4)
        self.assertAlmostEqual(c.box.height, 50.0, places=4)

    def test_top_left_is_truncated_not_rounded(self) -> None:
        # cx - w/2 = 0.7 * 10 - 0.26 * 10 / 2 = 5.7 -> 5 (rounding would give 6)
        p = np.array([_row(0.7, 0.7, 0.26, 0.26, 0.8)], dtype=np.float32)
        c = decode([p], 10, 10, 0.5)[0]
        self.assertEqual((c.box.x, c.box.y), (5, 5))
        self.assertIsInstance(c.box.x, int)
        self.assertIsInstance(c.box.width, float)

    def test_negative_corner_truncates_toward_zero(self) -> None:
        # cx - w/2 = 10 - 25.5 = -15.5 -> -15
        p = np.array([_row(0.1, 0.1, 0.51, 0.51, 0.8)], dtype=np.float32)
        c = decode([p], 100, 100, 0.5)[0]
        self.assertEqual((c.box.x, c.box.y), (-15, -15))

    def test_box_past_edge_is_not_clipped(self) -> None:
        # cx - w/2 = 87.5 - 25 = 62.5 -> 62, right edge lands at 112 on a 100px image
        p = np.array([_row(0.875, 0.5, 0.5, 0.5, 0.8)], dtype=np.float32)
        c = decode([p], 100, 100, 0.5)[0]
        self.assertEqual(c.box.x, 62)
        self.assertAlmostEqual(c.box.x2, 112.0, places=4)

    def test_threshold_is_strict(self) -> None:
        p = np.array(
            [
                _row(0.5, 0.5, 0.1, 0.1, 0.5, 0.0),
                _row(0.5, 0.5, 0.1, 0.1, 0.0, 0.75),
            ],
            dtype=np.float32,
        )
        cands = decode([p], 100, 100, 0.5)
        self.assertEqual(len(cands), 1)
        self.assertEqual(cands[0].class_id, 1)

    def test_argmax_tie_goes_to_lowest_class(self) -> None:
        p = np.array([_row(0.5, 0.5, 0.1, 0.1, 0.2, 0.8, 0.8)], dtype=np.float32)
        self.assertEqual(decode([p], 100, 100, 0.5)[0].class_id, 1)

    def test_objectness_is_not_used_for_confidence(self) -> None:
        p = np.array([_row(0.5, 0.5, 0.1, 0.1, 0.9, obj=0.01)], dtype=np.float32)
        cands = decode([p], 100, 100, 0.5)
        self.assertEqual(len(cands), 1)
        self.assertAlmostEqual(cands[0].confidence, 0.9, places=6)

    def test_multiple_heads_are_concatenated(self) -> None:
        h1 = np.array([_row(0.2, 0.2, 0.1, 0.1, 0.9, 0.0)], dtype=np.float32)
        h2 = np.array([_row(0.8, 0.8, 0.1, 0.1, 0.0, 0.7), _row(0.5, 0.5, 0.1, 0.1, 0.1, 0.1)], dtype=np.float32)
        cands = decode([h1, h2], 100, 100, 0.5)
        self.assertEqual([c.class_id for c in cands], [0, 1])

    def test_no_rows_gives_empty_list(self) -> None:
        self.assertEqual(decode([], 100, 100, 0.5), [])
        self.assertEqual(decode([np.zeros((0, 85), dtype=np.float32)], 100, 100, 0.5), [])

    def test_all_zero_output_gives_empty_list(self) -> None:
        self.assertEqual(decode([np.zeros((507, 85), dtype=np.float32)], 416, 416, 0.5), [])

    def test_leading_batch_axis_is_squeezed(self) -> None:
        p = np.array([[_row(0.5, 0.5, 0.1, 0.1, 0.9)]], dtype=np.float32)
        self.assertEqual(len(decode([p], 100, 100, 0.5)), 1)

    def test_batch_above_one_rejected(self) -> None:
        p = np.zeros((2, 3, 85), dtype=np.float32)
        with self.assertRaises(ValueError):
            decode([p], 100, 100, 0.5)

    def test_rows_without_class_scores_rejected(self) -> None:
        with self.assertRaises(ValueError):
            decode([np.zeros((3, 5), dtype=np.float32)], 100, 100, 0.5)


class TestYoloPostprocessor(unittest.TestCase):
    def test_process_decodes_and_suppresses(self) -> None:
        p = np.array(
            [
                _row(0.5, 0.5, 0.5, 0.5, 0.9, 0.0),
                _row(0.51, 0.5, 0.5, 0.5, 0.0, 0.8),  # near duplicate, other class
                _row(0.1, 0.1, 0.1, 0.1, 0.7, 0.0),
            ],
            dtype=np.float32,
        )
        post = YoloPostprocessor(YoloPostConfig(conf_threshold=0.5, iou_threshold=0.4))
        dets = post.process([p], orig_size=(100, 100))
        self.assertEqual(len(dets), 2)
        self.assertEqual({d.class_id for d in dets}, {0})
        self.assertIn(Box(x=25, y=25, width=50.0, height=50.0), [d.box for d in dets])

    def test_defaults(self) -> None:
        cfg = YoloPostConfig()
        self.assertEqual(cfg.conf_threshold, 0.5)
        self.assertEqual(cfg.iou_threshold, 0.4)


if __name__ == "__main__":
    unittest.main()
