#!/usr/bin/env python3
import sys
from pathlib import Path
from cardscan.core.config import build_config, load_yaml, template_params
from cardscan.core.pipeline import process_frame
from cardscan.io.ingest import load_image, save_image
from cardscan.match.templates import load_template_set

def main():
    if len(sys.argv) < 2:
        print("Usage: python3 -m tools.dump_card_stages <image.png> [out_dir] [cfg.yaml]")
        sys.exit(2)
    inp = Path(sys.argv[1])
    out_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else inp.with_name(inp.stem + "_stages")
    raw = load_yaml(sys.argv[3]) if len(sys.argv) > 3 else {}
    raw["capture_diagnostics"] = True
    tp = template_params(raw)
    res = process_frame(load_image(inp), load_template_set(tp.folder, tp.ext, tp.rank_size), build_config(raw))
    for name, img in res.diagnostics.items():
        save_image(out_dir / f"{name.replace(' ', '_')}.png", img)
    for i, card in enumerate(res.cards):
        for name, img in card.diagnostics.items():
            save_image(out_dir / f"card{i}" / f"{name.replace(' ', '_')}.png", img)
    print(f"[OK] {len(res.cards)} card(s), stages saved to: {out_dir}")

if __name__ == "__main__":
    main()
