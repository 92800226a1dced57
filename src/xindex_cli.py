"""
xindex_cli.py
=============

Command-line interface for the xindex-analyzer system.

This module provides an interactive text-based menu for:
- Computing expertise indices for one publication table (Option 1)
- Batch computing indices for a folder of tables with a SINGLE progress bar (Option 2)
- Showing the configured column defaults (Option 3)
- Clean exit (Option 4)

Optional Configuration (.env)
-----------------------------
XINDEX_ID_COLUMN=UT (Unique WOS ID)
XINDEX_CIT_COLUMN=Times Cited, WoS Core
XINDEX_KW_COLUMN=Keywords Plus
XINDEX_CAT_COLUMN=WoS Categories
XINDEX_DELIMITER=;
XINDEX_INPUT_DIR=info

Defaults match a Web of Science export, so an exported CSV can be
analysed without any configuration.

File Structure Created
----------------------
info/
├── {Institution}.csv                 ← your export
├── {Institution}_xindex.json         ← Option 1
└── xindex_batch_summary.csv          ← Option 2

Authors: Diogo Abreu, João Machado, Pedro Lopes
Date: 11/2025
Version: 3.0 (xindex-analyzer)
"""

import os
import json
import pandas as pd
from dotenv import load_dotenv
from tqdm import tqdm

from expertise_index import expertise_summary


# ============================================================
# CONFIGURATION - Web of Science export defaults
# ============================================================
DEFAULT_CONFIG = {
    "id": "UT (Unique WOS ID)",
    "cit": "Times Cited, WoS Core",
    "kw": "Keywords Plus",
    "cat": "WoS Categories",
    "dlm": ";",
    "input_dir": "info",
}

_ENV_KEYS = {
    "id": "XINDEX_ID_COLUMN",
    "cit": "XINDEX_CIT_COLUMN",
    "kw": "XINDEX_KW_COLUMN",
    "cat": "XINDEX_CAT_COLUMN",
    "dlm": "XINDEX_DELIMITER",
    "input_dir": "XINDEX_INPUT_DIR",
}


def load_config():
    """
    Load column/delimiter defaults from the environment (.env supported).

    Returns
    -------
    dict
        Keys 'id', 'cit', 'kw', 'cat', 'dlm', 'input_dir'
    """
    load_dotenv()
    config = {}
    for key, env_key in _ENV_KEYS.items():
        value = os.getenv(env_key, "")
        # Delimiters may legitimately be whitespace, so only names are stripped
        if key != "dlm":
            value = value.strip()
        config[key] = value or DEFAULT_CONFIG[key]
    return config


def load_publications(path):
    """Read a publication table from a .csv or .json file."""
    if path.lower().endswith(".json"):
        return pd.read_json(path, dtype=False)
    return pd.read_csv(path)


def compute_indices_for_table(df, config, type="h", verbose=True):
    """
    Compute every expertise index the table's columns allow.

    Keyword/category columns absent from `df` are skipped instead of
    failing, so tables without categories still yield the x-index.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table
    config : dict
        Output of `load_config`
    type : str, optional
        "h" (default) or "g"
    verbose : bool, optional
        Print variant diagnostics

    Returns
    -------
    dict
        JSON-ready results: {'type', 'documents', 'index', '<family>':
        {'index': int, 'core': [tags]}, ...}
    """
    kw = config["kw"] if config["kw"] in df.columns else None
    cat = config["cat"] if config["cat"] in df.columns else None

    summary = expertise_summary(df, config["id"], config["cit"], kw=kw, cat=cat, type=type,
                                kdlm=config["dlm"], cdlm=config["dlm"], verbose=verbose)

    results = {"type": type, "documents": int(len(df)), "index": summary.pop("index")}
    for family, result in summary.items():
        results[family] = {"index": result.index, "core": list(result.core)}
    return results


def save_results(results, path):
    """Write a results dict as indented JSON."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(results, f, indent=4, ensure_ascii=False)


def print_results(results):
    """Pretty-print the output of `compute_indices_for_table`."""
    print(f"\n📈 {results['type']}-type indices ({results['documents']:,} documents):")
    print("   Index          | Value | Core")
    print("   " + "-" * 50)
    print(f"   {results['type'] + '-index':<14} | {results['index']:>5} |")
    for family, value in results.items():
        if not isinstance(value, dict):
            continue
        core = "; ".join(value["core"][:5]) + (" ..." if len(value["core"]) > 5 else "")
        print(f"   {family:<14} | {value['index']:>5} | {core}")


def show_menu():
    """Display the xindex-analyzer menu."""
    print("\n=== 📊 xindex-analyzer Menu ===")
    print("🔍 1. Compute expertise indices for a table")
    print("🚀 2. Batch compute indices for a folder")
    print("⚙️  3. Show configured columns")
    print("❌ 4. Exit")
    return input("Choose an option: ").strip()


def ask_index_type():
    """Prompt for h/g until a valid answer is given."""
    while True:
        choice = input("Index type [h/g] (default h): ").strip().lower() or "h"
        if choice in ("h", "g"):
            return choice
        print("❌ Please answer 'h' or 'g'.")


def option_1_single_table(config):
    """🔍 Option 1: Compute and save indices for one table."""
    path = input("Enter path to CSV/JSON table: ").strip()
    if not os.path.exists(path):
        print(f"❌ File not found: {path}")
        return

    index_type = ask_index_type()
    df = load_publications(path)
    print(f"\n📊 Loaded {len(df):,} rows from {path}")

    try:
        results = compute_indices_for_table(df, config, type=index_type)
    except (KeyError, ValueError) as ex:
        print(f"❌ Could not compute indices: {ex}")
        print("   👉 Check column names with Option 3.")
        return

    print_results(results)

    out_path = os.path.splitext(path)[0] + "_xindex.json"
    save_results(results, out_path)
    print(f"\n✅ Results saved to:")
    print(f"   • {out_path}")


def batch_compute(folder, config, type="h"):
    """
    Compute indices for every CSV/JSON table in a folder.

    Failing tables are reported and skipped; the rest are still computed.

    Returns
    -------
    pd.DataFrame
        One row per successfully processed table
    """
    files = sorted(
        f for f in os.listdir(folder)
        if f.lower().endswith((".csv", ".json")) and not f.endswith("_xindex.json")
    )

    rows = []
    errors = 0
    with tqdm(total=len(files), desc="📊 TABLES", unit="table", leave=True, ncols=120) as pbar:
        for name in files:
            pbar.set_description(f"📥 {name[:30]}")
            try:
                df = load_publications(os.path.join(folder, name))
                results = compute_indices_for_table(df, config, type=type, verbose=False)
                row = {"file": name, "documents": results["documents"], "index": results["index"]}
                for family, value in results.items():
                    if isinstance(value, dict):
                        row[family] = value["index"]
                rows.append(row)
            except Exception as ex:
                errors += 1
                tqdm.write(f"⚠️ Skip {name}: {str(ex)[:80]}")
            pbar.set_postfix({"done": len(rows), "err": errors})
            pbar.update(1)

    return pd.DataFrame(rows)


def option_2_batch(config):
    """🚀 Option 2: Batch compute for all tables in the input folder."""
    folder = input(f"Enter folder (default {config['input_dir']}): ").strip() or config["input_dir"]
    if not os.path.isdir(folder):
        print(f"❌ Folder not found: {folder}")
        return

    index_type = ask_index_type()
    summary = batch_compute(folder, config, type=index_type)

    if summary.empty:
        print("❌ No tables could be processed.")
        return

    out_path = os.path.join(folder, "xindex_batch_summary.csv")
    summary.to_csv(out_path, index=False)

    print(f"\n{'='*70}")
    print(f"📈 BATCH COMPLETE!")
    print(summary.to_string(index=False))
    print(f"📁 Summary saved: {out_path}")
    print(f"{'='*70}\n")


def option_3_show_config(config):
    """⚙️ Option 3: Show active column names and delimiter."""
    print("\n⚙️  Active configuration (.env overrides Web of Science defaults):")
    for key, env_key in _ENV_KEYS.items():
        print(f"   • {env_key:<18} = {config[key]!r}")


def main():
    """Main CLI loop with emoji-styled output."""
    print("=== 📊 xindex-analyzer CLI ===")
    config = load_config()
    while True:
        choice = show_menu()

        if choice == "1":
            option_1_single_table(config)
        elif choice == "2":
            option_2_batch(config)
        elif choice == "3":
            option_3_show_config(config)
        elif choice == "4":
            print("\n👋 Thanks for using xindex-analyzer!")
            break
        else:
            print("\n❌ Invalid option. Please choose 1-4.")


if __name__ == "__main__":
    main()
