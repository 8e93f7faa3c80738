"""
Metadata describing a quantification run and the directories it writes to.

The values defined here replace any reliance on the process working directory:
every operation receives a RunContext that says where the cached tx2gene files
live and where temporary files of the current (tool, species, library) may be
written.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""

import os
from dataclasses import dataclass
from typing import Optional

SUPPORTED_TOOLS = ('kallisto', 'salmon')

ANNOTATION_EXTENSIONS = ('.gz', '.gtf', '.gff', '.gff3')


@dataclass
class UserMetadata:
    """
    Information provided by the user about the species and the library.

    Attributes
    ----------
    species_id : str
        NCBI taxonomy identifier of the species (e.g., '6239')
    annotation_file : str
        Path to the GTF or GFF3 annotation of the species
    annotation_name : str
        Name of the annotation. Deduced from annotation_file when empty.
    intergenic_file : str
        Path to the reference intergenic FASTA or to a list of intergenic ids
    rnaseq_lib_path : str
        Directory of the RNA-seq library
    working_path : str
        Root directory for all generated files
    simple_arborescence : bool
        If True, species and annotation levels are not created in working_path
    verbose : bool
        If True, progress bars and debug messages are displayed
    """
    species_id: str
    annotation_file: str = ''
    annotation_name: str = ''
    intergenic_file: str = ''
    rnaseq_lib_path: str = ''
    working_path: str = '.'
    simple_arborescence: bool = False
    verbose: bool = False

    def __post_init__(self):
        if not self.annotation_name and self.annotation_file:
            name = os.path.basename(self.annotation_file)
            while name.lower().endswith(ANNOTATION_EXTENSIONS):
                name = name.rsplit('.', 1)[0]
            self.annotation_name = name

    @property
    def library_name(self):
        return os.path.basename(os.path.normpath(self.rnaseq_lib_path)) if self.rnaseq_lib_path else 'library'


@dataclass
class AbundanceMetadata:
    """
    Description of the abundance file written by a quantification tool and of
    the way it has to be aggregated.

    `ignore_tx_version` and `normalize_intergenic_names` are kept together on
    purpose: the dots of intergenic names only have to be rewritten when the
    aggregator strips transcript versions. When left to None,
    `normalize_intergenic_names` follows `ignore_tx_version`.
    """
    tool_name: str = 'kallisto'
    transcript_id_header: str = 'target_id'
    count_header: str = 'est_counts'
    eff_length_header: str = 'eff_length'
    abundance_header: str = 'tpm'
    abundance_file: str = 'abundance.tsv'
    tx2gene_file: str = 'tx2gene.tsv'
    tx2gene_file_without_version: str = 'tx2gene_without_version.tsv'
    tx_out: bool = False
    ignore_tx_version: bool = False
    normalize_intergenic_names: Optional[bool] = None

    def __post_init__(self):
        if self.tool_name not in SUPPORTED_TOOLS:
            raise ValueError(f"Unsupported quantification tool '{self.tool_name}'. "
                             f"Options are: {', '.join(SUPPORTED_TOOLS)}")
        if self.normalize_intergenic_names is None:
            self.normalize_intergenic_names = self.ignore_tx_version
        elif self.normalize_intergenic_names and not self.ignore_tx_version:
            raise ValueError("Intergenic names can only be normalized when transcript versions are ignored")

    @property
    def tx2gene_name(self):
        """Name of the cached tx2gene file. Depends on version stripping."""
        if self.ignore_tx_version:
            return self.tx2gene_file_without_version
        return self.tx2gene_file


@dataclass
class KallistoMetadata(AbundanceMetadata):
    tool_name: str = 'kallisto'


@dataclass
class SalmonMetadata(AbundanceMetadata):
    tool_name: str = 'salmon'
    transcript_id_header: str = 'Name'
    count_header: str = 'NumReads'
    eff_length_header: str = 'EffectiveLength'
    abundance_header: str = 'TPM'
    abundance_file: str = 'quant.sf'


def get_abundance_metadata(tool_name, **kwargs):
    """
    Return the AbundanceMetadata matching a quantification tool.

    Parameters
    ----------
    tool_name : str
        'kallisto' or 'salmon'
    **kwargs
        Any AbundanceMetadata field to override

    Returns
    -------
    AbundanceMetadata
    """
    if tool_name == 'kallisto':
        return KallistoMetadata(**kwargs)
    if tool_name == 'salmon':
        return SalmonMetadata(**kwargs)
    raise ValueError(f"Unsupported quantification tool '{tool_name}'. Options are: {', '.join(SUPPORTED_TOOLS)}")


def get_annotation_path(user_metadata):
    """Directory where the tx2gene files of an annotation are cached."""
    if user_metadata.simple_arborescence:
        return os.path.join(user_metadata.working_path, user_metadata.annotation_name)
    return os.path.join(user_metadata.working_path, user_metadata.species_id, user_metadata.annotation_name)


def get_tool_output_path(abundance_metadata, user_metadata):
    """Directory of the current (tool, species, library) context."""
    if user_metadata.simple_arborescence:
        return os.path.join(user_metadata.working_path, abundance_metadata.tool_name, user_metadata.library_name)
    return os.path.join(get_annotation_path(user_metadata), abundance_metadata.tool_name,
                        user_metadata.library_name)


@dataclass(frozen=True)
class RunContext:
    """
    Directories used by one invocation.

    Attributes
    ----------
    output_dir : str
        Directory holding the abundance file and the temporary files
    annotation_dir : str
        Directory holding the cached tx2gene files
    """
    output_dir: str
    annotation_dir: str

    @classmethod
    def from_metadata(cls, abundance_metadata, user_metadata):
        return cls(output_dir=get_tool_output_path(abundance_metadata, user_metadata),
                   annotation_dir=get_annotation_path(user_metadata))

    def tx2gene_path(self, abundance_metadata):
        return os.path.join(self.annotation_dir, abundance_metadata.tx2gene_name)

    def abundance_path(self, abundance_metadata):
        return os.path.join(self.output_dir, abundance_metadata.abundance_file)


def add_metadata_arguments(parser):
    """
    Add the arguments shared by every subcommand that works on a library.

    Parameters
    ----------
    parser : argparse.ArgumentParser
        Parser (or subparser) to extend
    """
    user_group = parser.add_argument_group('User arguments', 'Species, annotation and library settings')
    user_group.add_argument('--species-id', required=True, help='NCBI taxonomy id of the species (e.g., 6239)')
    user_group.add_argument('--annotation', required=True, help='Annotation of the species in GTF or GFF3 format')
    user_group.add_argument('--annotation-name', default='',
                            help='Name of the annotation (default: deduced from the annotation file name)')
    user_group.add_argument('--intergenic', required=True,
                            help='Reference intergenic FASTA or text file with one intergenic id per line')
    user_group.add_argument('--rnaseq-lib-path', default='', help='Directory of the RNA-seq library')
    user_group.add_argument('--working-path', '-w', default='.', help='Working directory (default: .)')
    user_group.add_argument('--simple-arborescence', action='store_true',
                            help='Do not create species and annotation sub-directories')
    user_group.add_argument('--verbose', '-v', action='store_true', help='Print debug messages')

    abundance_group = parser.add_argument_group('Abundance arguments', 'Quantification tool settings')
    abundance_group.add_argument('--tool', choices=SUPPORTED_TOOLS, default='kallisto',
                                 help='Tool used to quantify the library (default: kallisto)')
    abundance_group.add_argument('--abundance-file', default=None,
                                 help='Path to the abundance file (default: deduced from the output layout)')
    abundance_group.add_argument('--tx-out', action='store_true',
                                 help='Keep transcript level output instead of summarizing to genes')
    abundance_group.add_argument('--ignore-tx-version', action='store_true',
                                 help='Remove transcript versions before matching transcripts to genes')


def metadata_from_args(args):
    """
    Build the metadata objects and the run context from parsed arguments.

    Returns
    -------
    tuple
        (AbundanceMetadata, UserMetadata, RunContext)
    """
    user_metadata = UserMetadata(
        species_id=str(args.species_id),
        annotation_file=args.annotation,
        annotation_name=args.annotation_name,
        intergenic_file=args.intergenic,
        rnaseq_lib_path=args.rnaseq_lib_path,
        working_path=args.working_path,
        simple_arborescence=args.simple_arborescence,
        verbose=args.verbose
    )
    abundance_metadata = get_abundance_metadata(args.tool, tx_out=args.tx_out,
                                                ignore_tx_version=args.ignore_tx_version)
    context = RunContext.from_metadata(abundance_metadata, user_metadata)
    return abundance_metadata, user_metadata, context
