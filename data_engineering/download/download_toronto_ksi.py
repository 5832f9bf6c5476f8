#!/usr/bin/env python3
"""
Download the Toronto KSI collision extract from the City of Toronto Open Data Portal (CKAN API)

The dataset lists every person involved in a collision where someone was
killed or seriously injured (Toronto Police Service, 2006 onward).

Data source: https://open.toronto.ca/dataset/motor-vehicle-collisions-involving-killed-or-seriously-injured-persons/
API endpoint: https://ckan0.cf.opendata.inter.prod-toronto.ca/api/3/action/package_show

The download is cached: an existing file is reused unless --force is given.

Usage:
    python download_toronto_ksi.py              # Download if not cached
    python download_toronto_ksi.py --force      # Always re-download
    python download_toronto_ksi.py --output ksi.csv
"""

import argparse
import os
import sys
import tempfile
from pathlib import Path

import requests

sys.path.append(str(Path(__file__).parent.parent.parent))
from config.pipeline_config import PipelineConfig
from data_engineering.clean.errors import SourceUnavailableError

# Configuration
REQUEST_TIMEOUT = 60
CHUNK_SIZE = 1024 * 1024


def get_package_resources(base_url, package_id):
    """Return the resource list of a CKAN package"""
    url = f"{base_url}/api/3/action/package_show"
    try:
        response = requests.get(url, params={"id": package_id}, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise SourceUnavailableError(url, f"package lookup failed: {e}") from e

    if not data.get("success"):
        raise SourceUnavailableError(url, f"CKAN returned an error for package '{package_id}'")

    return data["result"].get("resources", [])


def resolve_csv_url(base_url, resources):
    """
    Pick the CSV download URL from a package's resources

    Datastore-active resources are exported through the datastore dump
    endpoint; otherwise the first CSV resource's own URL is used.
    """
    for resource in resources:
        if resource.get("datastore_active"):
            return f"{base_url}/datastore/dump/{resource['id']}"

    for resource in resources:
        if str(resource.get("format", "")).upper() == "CSV" and resource.get("url"):
            return resource["url"]

    raise SourceUnavailableError(base_url, "no CSV resource found in package")


def download_file(url, output_file):
    """Stream url to output_file; nothing is left behind on failure"""
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{output_file.stem}_", suffix=".part", dir=output_file.parent)
    tmp_path = Path(tmp_name)
    written = 0
    try:
        with os.fdopen(fd, "wb") as fh:
            with requests.get(url, stream=True, timeout=REQUEST_TIMEOUT) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
                        written += len(chunk)
                        print(f"   Downloaded: {written / 1024 / 1024:.1f} MB...", end='\r')
        if written == 0:
            raise SourceUnavailableError(url, "download was empty")
        os.replace(tmp_path, output_file)
    except requests.exceptions.RequestException as e:
        tmp_path.unlink(missing_ok=True)
        raise SourceUnavailableError(url, f"download failed: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    print()
    return output_file


def download_ksi(config: PipelineConfig, verbose=True):
    """
    Make sure the raw KSI extract exists at config.raw_path

    Returns:
        Path to the raw file

    Raises:
        SourceUnavailableError: If the extract cannot be fetched
    """
    output_file = config.raw_path

    if output_file.exists() and not config.force_download:
        if verbose:
            print(f"✓ Using cached extract: {output_file}")
            print(f"   File size: {output_file.stat().st_size / 1024 / 1024:.1f} MB")
        return output_file

    if verbose:
        print("🔍 Resolving KSI resource...")
        print(f"   API: {config.ckan_base_url}")
    resources = get_package_resources(config.ckan_base_url, config.package_id)
    url = resolve_csv_url(config.ckan_base_url, resources)

    if verbose:
        print(f"\n📥 Downloading {url}")
    download_file(url, output_file)

    if verbose:
        print(f"💾 Saved to: {output_file}")
        print(f"   File size: {output_file.stat().st_size / 1024 / 1024:.1f} MB")

    return output_file


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Download the Toronto KSI collision extract",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Download into the bronze layer (skipped if already cached)
  python download_toronto_ksi.py

  # Refresh the cached extract
  python download_toronto_ksi.py --force
        """
    )

    parser.add_argument('--output', type=str, default=None,
                       help='Where to save the raw CSV')
    parser.add_argument('--force', action='store_true',
                       help='Re-download even if the file exists')

    args = parser.parse_args(argv)

    config = PipelineConfig.from_defaults(raw_path=args.output, force_download=args.force)

    print("🚀 Toronto KSI Downloader")
    print("="*60 + "\n")

    try:
        download_ksi(config)
    except SourceUnavailableError as e:
        print(f"\n❌ {e}")
        return 1

    print("\n✅ Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
