#!/usr/bin/env python3

import argparse
import logging
import os
from typing import Dict, List
from pathlib import Path

from dotenv import load_dotenv

from contact_search.core.contact import Contact
from contact_search.core.ranker import ContactRanker
from contact_search.io.csv import CSVHandler
from contact_search.io.vcard import VCardHandler
from contact_search.settings import DEFAULT_PREFILTER_RATIO, DEFAULT_WEIGHTS, LOG_LEVEL_ENV

CSV_SUFFIXES = {".csv"}
VCARD_SUFFIXES = {".vcf", ".vcard"}


def expand_inputs(input_paths: List[Path]) -> List[Path]:
    """Replace directories with the contact files they contain"""
    expanded = []
    for path in input_paths:
        if path.is_dir():
            expanded.extend(
                sorted(p for p in path.iterdir() if p.suffix.lower() in CSV_SUFFIXES | VCARD_SUFFIXES)
            )
        else:
            expanded.append(path)
    return expanded


def load_contacts(input_paths: List[Path]) -> List[Contact]:
    """Load contacts from input files"""
    contacts = []
    csv_handler = CSVHandler()
    vcard_handler = VCardHandler()

    logging.info(f"Loading contacts from {len(input_paths)} files")
    for path in input_paths:
        try:
            logging.debug(f"Processing file: {path}")
            if path.suffix.lower() in CSV_SUFFIXES:
                new_contacts = csv_handler.read_csv(str(path))
                logging.debug(f"Loaded {len(new_contacts)} contacts from CSV: {path}")
            elif path.suffix.lower() in VCARD_SUFFIXES:
                new_contacts = vcard_handler.read_vcard(str(path))
                logging.debug(f"Loaded {len(new_contacts)} contacts from VCard: {path}")
            else:
                raise ValueError(f"Unsupported file format: {path}")
            contacts.extend(new_contacts)
        except Exception as e:
            logging.error(f"Error loading file {path}: {e}")
            raise

    logging.info(f"Successfully loaded {len(contacts)} contacts in total")
    return contacts


def parse_weights(text: str) -> Dict[str, float]:
    """Parse 'name=1,email=0.5' into a weight map"""
    weights = {}
    for item in text.split(","):
        if not item.strip():
            continue
        field, sep, value = item.partition("=")
        if not sep or not field.strip():
            raise ValueError(f"Invalid weight '{item}', expected field=number")
        try:
            weights[field.strip()] = float(value)
        except ValueError:
            raise ValueError(f"Invalid weight value for '{field.strip()}': {value!r}") from None
    return weights


def save_results(contacts: List[Contact], output_path: Path) -> None:
    """Save ranked contacts as CSV or vCard, keeping their rank order"""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.suffix.lower() in VCARD_SUFFIXES:
        VCardHandler().write_vcard(contacts, str(output_path))
    else:
        CSVHandler().write_csv(contacts, str(output_path))
    logging.info(f"Saved {len(contacts)} ranked contacts to {output_path}")


def format_contact(rank: int, contact: Contact) -> str:
    details = [d for d in (contact.email, contact.company, contact.title) if d]
    suffix = f" ({', '.join(details)})" if details else ""
    return f"{rank:>3}. {contact.name}{suffix}"


def main(
    query: str,
    input_paths: List[Path],
    weights: Dict[str, float] = None,
    limit: int = None,
    prefilter_ratio: int = None,
    output_path: Path = None,
) -> List[Contact]:
    ranker = ContactRanker(DEFAULT_WEIGHTS if weights is None else weights, prefilter_ratio=prefilter_ratio)

    try:
        contacts = load_contacts(expand_inputs(input_paths))

        logging.info(f'Ranking {len(contacts)} contacts for "{query}"')
        results = ranker.rank(query, contacts)
        if limit is not None:
            results = results[:limit]

        if output_path is not None:
            save_results(results, output_path)
        else:
            for position, contact in enumerate(results, start=1):
                print(format_contact(position, contact))

        return results

    except Exception as e:
        logging.error(f"Error searching contacts: {e}")
        raise


if __name__ == "__main__":
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Fuzzy search contact files and print the best matches."
    )
    parser.add_argument("query", help="Free-text search query")
    parser.add_argument(
        "inputs",
        nargs="*",
        help="Input file paths (.vcf or .csv). Can also be a directory containing the files.",
    )
    parser.add_argument(
        "--weights",
        "-w",
        help="Field weights as field=number pairs, e.g. name=1,email=0.8,company=0.6",
    )
    parser.add_argument(
        "--limit", "-n", type=int, help="Maximum number of results to show"
    )
    parser.add_argument(
        "--prefilter",
        "-p",
        type=int,
        nargs="?",
        const=DEFAULT_PREFILTER_RATIO,
        help=f"Skip contacts whose best partial match is below this ratio (0-100, default {DEFAULT_PREFILTER_RATIO})",
    )
    parser.add_argument(
        "--output", "-o", help="Write results to this .csv or .vcf file instead of printing"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if not args.inputs:
        parser.print_help()
    else:
        # Configure logging based on verbose flag, then the environment
        level = "DEBUG" if args.verbose else os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
        logging.basicConfig(
            level=getattr(logging, level, logging.WARNING),
            format="%(asctime)s - %(levelname)s - %(message)s"
        )

        main(
            args.query,
            [Path(p) for p in args.inputs],
            weights=parse_weights(args.weights) if args.weights else None,
            limit=args.limit,
            prefilter_ratio=args.prefilter,
            output_path=Path(args.output) if args.output else None,
        )
