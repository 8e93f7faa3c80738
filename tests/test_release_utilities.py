import os

import pytest

from intergenic_call.exceptions import NetworkError
from intergenic_call.release_utilities import compare_version, get_intergenic_release, list_intergenic_release

from conftest import write_tsv

RELEASE_HEADER = ['release', 'releaseDate', 'FTPURL', 'referenceIntergenicFastaURL',
                  'minimumVersionBgeeCall', 'description', 'messageToUsers']
RELEASE_ROWS = [
    ['0.1', '2018-12-21', 'ftp://example.org/0.1/', 'ftp://example.org/0.1/ref.fa.gz', '0.9.9',
     'first release', ''],
    ['1.0', '2019-06-01', 'ftp://example.org/1.0/', 'ftp://example.org/1.0/ref.fa.gz', '1.0.0',
     'second release', 'use this one'],
    ['2.0', '2030-01-01', 'ftp://example.org/2.0/', 'ftp://example.org/2.0/ref.fa.gz', '99.0.0',
     'future release', ''],
]


@pytest.fixture
def release_url(tmp_path):
    path = write_tsv(tmp_path / 'intergenic_release.tsv', RELEASE_HEADER, RELEASE_ROWS)
    return 'file://' + os.path.abspath(path)


def test_compare_version():
    assert compare_version('1.0.0', '1.0.0') == 0
    assert compare_version('0.9.9', '1.0.0') == -1
    assert compare_version('1.10', '1.9') == 1
    assert compare_version('1.0', '1.0.1') == -1
    assert compare_version('2-1', '2.0') == 1


def test_releases_requiring_newer_version_are_hidden(release_url, tmp_path):
    download_dir = tmp_path / 'download'
    releases = get_intergenic_release(release_url, download_dir=str(download_dir))
    assert releases['release'].tolist() == ['0.1', '1.0']
    assert os.listdir(download_dir) == []


def test_downloaded_file_can_be_kept(release_url, tmp_path):
    download_dir = tmp_path / 'download'
    get_intergenic_release(release_url, download_dir=str(download_dir), remove_file=False)
    assert os.listdir(download_dir) == ['release.tsv']


def test_list_exposes_renamed_columns(release_url, tmp_path):
    releases = list_intergenic_release(release_url=release_url, download_dir=str(tmp_path))
    assert releases.columns.tolist() == ['release', 'releaseDate', 'accessURL', 'fastaURL',
                                         'minimumVersion', 'description', 'message']
    assert len(releases) == 2


def test_list_targeted_release(release_url, tmp_path):
    releases = list_intergenic_release('1.0', release_url=release_url, download_dir=str(tmp_path))
    assert releases['release'].tolist() == ['1.0']
    assert releases['message'].tolist() == ['use this one']


def test_unavailable_release(release_url, tmp_path):
    with pytest.raises(ValueError, match='2.0'):
        list_intergenic_release('2.0', release_url=release_url, download_dir=str(tmp_path))


def test_download_failure(tmp_path):
    missing_url = 'file://' + os.path.abspath(str(tmp_path / 'missing.tsv'))
    with pytest.raises(NetworkError):
        get_intergenic_release(missing_url, download_dir=str(tmp_path / 'download'))
    assert os.listdir(tmp_path / 'download') == []


def test_compare_version_rejects_non_numeric_parts():
    with pytest.raises(ValueError):
        compare_version('', '1.0.0')
    with pytest.raises(ValueError):
        compare_version('1.x', '1.0.0')


def test_release_with_invalid_minimum_version_is_skipped(tmp_path):
    rows = RELEASE_ROWS + [['3.0', '2031-01-01', 'ftp://example.org/3.0/', 'ftp://example.org/3.0/ref.fa.gz', '',
                            'no minimum version', ''],
                           ['4.0', '2032-01-01', 'ftp://example.org/4.0/', 'ftp://example.org/4.0/ref.fa.gz', 'beta',
                            'malformed minimum version', '']]
    path = write_tsv(tmp_path / 'intergenic_release.tsv', RELEASE_HEADER, rows)
    releases = get_intergenic_release('file://' + os.path.abspath(path), download_dir=str(tmp_path / 'download'))
    assert releases['release'].tolist() == ['0.1', '1.0']
