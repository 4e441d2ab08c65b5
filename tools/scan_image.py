#!/usr/bin/env python3
from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from cardscan.core.config import build_config, load_yaml, template_params
from cardscan.core.contracts import CARD_STAGE_TITLES, STAGE_TITLES
from cardscan.core.errors import CardScanError
from cardscan.core.pipeline import process_frame
from cardscan.io.ingest import load_image, save_image
from cardscan.match.templates import load_template_set


def main():
    ap = argparse.ArgumentParser(description="Detect playing cards in an image and guess rank/suit.")
    ap.add_argument("image", help="Path to input image.")
    ap.add_argument("--cfg", default="config/pipeline.yaml", help="Pipeline YAML config.")
    ap.add_argument("--templates", default=None, help="Template folder (overrides templates.folder).")
    ap.add_argument("--kernel", type=int, default=None, help="Gaussian kernel size (odd).")
    ap.add_argument("--canny", type=float, nargs=2, metavar=("LOW", "HIGH"), default=None)
    ap.add_argument("--workers", type=int, default=None)
    ap.add_argument("--stage", choices=STAGE_TITLES, default=None, help="Frame stage image to save.")
    ap.add_argument("--card", type=int, default=None, help="Card index for --card-stage.")
    ap.add_argument("--card-stage", choices=CARD_STAGE_TITLES, default=None)
    ap.add_argument("--out", default=None, help="Output PNG path. Default: tests/output/<image>_<stage>.png")
    ap.add_argument("--debug", action="store_true", help="Verbose pipeline logging.")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        raw = load_yaml(args.cfg) if Path(args.cfg).is_file() else {}
        if args.kernel is not None:
            raw.setdefault("gaussian", {})["kernel_size"] = args.kernel
        if args.canny is not None:
            raw.setdefault("canny", {}).update(low=args.canny[0], high=args.canny[1])
        if args.workers is not None:
            raw["workers"] = args.workers
        if args.templates:
            raw.setdefault("templates", {})["folder"] = args.templates
        # only need stage images when one is requested
        raw["capture_diagnostics"] = bool(args.stage or args.card_stage)

        cfg = build_config(raw)
        tp = template_params(raw)
        templates = load_template_set(tp.folder, tp.ext, tp.rank_size)
        img = load_image(args.image)
        res = process_frame(img, templates, cfg)
    except (CardScanError, FileNotFoundError) as e:
        raise SystemExit(f"[ERR] {e}")

    print(f"[OK] {len(res.cards)} card(s) in {args.image}")
    for i, c in enumerate(res.cards):
        mx, my = c.midpoint
        print(f"  #{i}: {c.label:<20} at ({mx:.0f}, {my:.0f})  rank_diff={c.rank_score} suit_diff={c.suit_score}")

    if args.stage or args.card_stage:
        if args.card_stage:
            idx = args.card or 0
            if not 0 <= idx < len(res.cards):
                print(f"[ERR] no card #{idx} (found {len(res.cards)})")
                sys.exit(1)
            name, img_out = f"card{idx}_{args.card_stage}", res.card_stage(idx, args.card_stage)
        else:
            name, img_out = args.stage, res.stage(args.stage)
        base = Path(args.image).stem
        out = Path(args.out) if args.out else Path("tests/output") / f"{base}_{name.replace(' ', '_')}.png"
        save_image(out, img_out)
        print(f"Saved {name} -> {out}")


if __name__ == "__main__":
    main()
