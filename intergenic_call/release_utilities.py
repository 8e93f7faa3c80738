"""
List the releases of reference intergenic regions that can be used with this package.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""

import logging
import os
import re
import tempfile
import urllib.error
import urllib.request

import pandas as pd
from tqdm import tqdm

from intergenic_call import __version__
from intergenic_call.exceptions import NetworkError

RELEASE_URL = 'ftp://ftp.bgee.org/intergenic/intergenic_release.tsv'

# Columns of the release file and the names under which they are exposed
RELEASE_COLUMNS = {
    'release': 'release',
    'releaseDate': 'releaseDate',
    'FTPURL': 'accessURL',
    'referenceIntergenicFastaURL': 'fastaURL',
    'minimumVersionBgeeCall': 'minimumVersion',
    'description': 'description',
    'messageToUsers': 'message',
}


def compare_version(a, b):
    """
    Compare two version strings made of integers separated by '.' or '-'.

    Returns
    -------
    int
        -1 if a < b, 0 if they are equal, 1 if a > b

    Raises
    ------
    ValueError
        If a part of a version is not an integer
    """
    a_parts = [int(x) for x in re.split(r'[.-]', str(a).strip())]
    b_parts = [int(x) for x in re.split(r'[.-]', str(b).strip())]
    for x, y in zip(a_parts, b_parts):
        if x != y:
            return 1 if x > y else -1
    if len(a_parts) == len(b_parts):
        return 0
    return 1 if len(a_parts) > len(b_parts) else -1


def is_release_available(minimum_version, version=__version__):
    """
    True if a release requiring minimum_version can be used with version.
    Releases with a missing or malformed minimum version are not available.
    """
    try:
        return compare_version(minimum_version, version) <= 0
    except ValueError:
        logging.warning(f"Ignoring release with invalid minimum version '{minimum_version}'")
        return False


def download_file(url, destination, verbose=False):
    """
    Download url to destination, through a temporary file.

    Raises
    ------
    NetworkError
        If the file could not be downloaded
    """
    temp_destination = destination + '.tmp'
    with tqdm(unit='B', unit_scale=True, desc=os.path.basename(destination), disable=not verbose) as progress_bar:
        def report(block_count, block_size, total_size):
            if total_size > 0:
                progress_bar.total = total_size
            progress_bar.update(block_count * block_size - progress_bar.n)

        try:
            urllib.request.urlretrieve(url, temp_destination, reporthook=report)
        except (urllib.error.URLError, OSError) as e:
            if os.path.exists(temp_destination):
                os.remove(temp_destination)
            logging.error(f"Could not download {url}: {e}")
            raise NetworkError(f"File describing intergenic releases could not be downloaded from {url}") from e

    os.replace(temp_destination, destination)
    return destination


def get_intergenic_release(release_url=RELEASE_URL, download_dir=None, remove_file=True, verbose=False):
    """
    Return all intergenic releases available for the current version of the package.

    Parameters
    ----------
    release_url : str
        URL of the file describing all releases
    download_dir : str, optional
        Directory where the release file is downloaded (default: system temporary directory)
    remove_file : bool
        If True, the downloaded file is removed once read

    Returns
    -------
    pd.DataFrame
        One row per release, with the columns of the release file
    """
    download_dir = download_dir or tempfile.gettempdir()
    os.makedirs(download_dir, exist_ok=True)
    release_file = download_file(release_url, os.path.join(download_dir, 'release.tsv'), verbose=verbose)
    try:
        all_releases = pd.read_csv(release_file, sep='\t', dtype=str, keep_default_na=False)
    finally:
        if remove_file:
            os.remove(release_file)

    # Keep intergenic releases available with the current version of the package
    available = all_releases['minimumVersionBgeeCall'].apply(is_release_available).astype(bool)
    logging.debug(f"{int(available.sum())} of {len(all_releases)} releases are available for version {__version__}")
    return all_releases[available].reset_index(drop=True)


def list_intergenic_release(release=None, release_url=RELEASE_URL, download_dir=None, verbose=False):
    """
    Describe the intergenic releases available to use with this package.

    Parameters
    ----------
    release : str, optional
        Targeted release (e.g., '1.0'). All releases are returned when None.

    Returns
    -------
    pd.DataFrame
        Columns release, releaseDate, accessURL, fastaURL, minimumVersion,
        description and message

    Raises
    ------
    ValueError
        If the targeted release does not exist or is not available
    """
    logging.info("Downloading release information of intergenic regions...")
    all_releases = get_intergenic_release(release_url, download_dir=download_dir, verbose=verbose)
    if release is not None:
        targeted = all_releases['release'] == str(release)
        if not targeted.any():
            raise ValueError(f"The specified release number ({release}) is invalid or is not available.")
        logging.info(f"Only displaying information from targeted release {release}")
        all_releases = all_releases[targeted]

    return all_releases[list(RELEASE_COLUMNS)].rename(columns=RELEASE_COLUMNS).reset_index(drop=True)
