"""
Read alignments, fix tags of reverse strand records and write them out.
"""

import sys
from collections import Counter

import pandas as pd
import pysam
from revtag import PROGRAM, VERSION, utils
from revtag.tags import reverse_tags_for, validate_tags

logger = utils.get_logger(__name__)

PROGRESS_UNIT = 100_000


def is_stdio(path) -> bool:
    return path is None or str(path) == "-"


def output_mode(path) -> str:
    """pysam write mode from the output file suffix.

    >>> output_mode("out.bam"), output_mode("out.cram"), output_mode("out.sam"), output_mode(None)
    ('wb', 'wc', 'w', 'w')
    """
    if is_stdio(path):
        return "w"
    path = str(path)
    if path.endswith(".bam"):
        return "wb"
    if path.endswith(".cram"):
        return "wc"
    return "w"


def add_pg(header_text: str, program: str, version: str, command_line: str) -> str:
    """Append a @PG line to the header text; ID gets a numeric suffix if already taken.

    Existing lines are kept as they are, in their order.

    >>> text = add_pg("@HD\\tVN:1.6\\n@PG\\tID:revtag\\n", "revtag", "0.1.0", "revtag --rev QT")
    >>> text.splitlines()[-1].split("\\t")
    ['@PG', 'ID:revtag.1', 'PN:revtag', 'VN:0.1.0', 'CL:revtag --rev QT']
    """
    ids = set()
    for line in header_text.splitlines():
        if line.startswith("@PG"):
            ids.update(field[3:] for field in line.split("\t")[1:] if field.startswith("ID:"))
    pg_id = program
    n = 0
    while pg_id in ids:
        n += 1
        pg_id = f"{program}.{n}"
    command_line = " ".join(command_line.split())
    pg_line = "\t".join(["@PG", f"ID:{pg_id}", f"PN:{program}", f"VN:{version}", f"CL:{command_line}"])
    if header_text and not header_text.endswith("\n"):
        header_text += "\n"
    return f"{header_text}{pg_line}\n"


class RevTag:
    def __init__(
        self,
        input_path=None,
        output_path=None,
        rev=(),
        revcomp=(),
        threads: int = 1,
        reference=None,
        program: str = PROGRAM,
        version: str = VERSION,
        command_line=None,
        summary=None,
    ):
        # fail on bad tag names before touching any file
        self.rev = validate_tags(rev)
        self.revcomp = validate_tags(revcomp)
        self.input_path = "-" if is_stdio(input_path) else str(input_path)
        self.output_path = "-" if is_stdio(output_path) else str(output_path)
        self.threads = threads
        self.reference = reference
        self.program = program
        self.version = version
        self.command_line = command_line if command_line is not None else " ".join(sys.argv)
        self.summary = summary

        # outputs
        self.records = 0
        self.reverse_records = 0
        self.counter = Counter()

    def open_reader(self) -> pysam.AlignmentFile:
        logger.info("Input: %s", "stdin" if self.input_path == "-" else self.input_path)
        return pysam.AlignmentFile(
            self.input_path,
            "r",
            check_sq=False,
            threads=self.threads,
            reference_filename=self.reference,
        )

    def open_writer(self, header_text: str) -> pysam.AlignmentFile:
        logger.info("Output: %s", "stdout" if self.output_path == "-" else self.output_path)
        return pysam.AlignmentFile(
            self.output_path,
            output_mode(self.output_path),
            header=pysam.AlignmentHeader.from_text(header_text),
            threads=self.threads,
            reference_filename=self.reference,
        )

    def process(self, record: pysam.AlignedSegment):
        self.records += 1
        if record.is_reverse:
            self.reverse_records += 1
            reverse_tags_for(record, self.rev, self.revcomp, self.counter)
        if self.records % PROGRESS_UNIT == 0:
            logger.info("Processed %s alignment records", f"{self.records:,}")

    def summary_df(self) -> pd.DataFrame:
        rows = [(tag, operation, kind, count) for (tag, operation, kind), count in self.counter.items()]
        df = pd.DataFrame(rows, columns=["tag", "operation", "kind", "count"])
        df = df.sort_values(by=["tag", "operation"], ignore_index=True)
        return df

    @utils.add_log
    def run(self) -> int:
        reader = self.open_reader()
        try:
            header_text = add_pg(str(reader.header), self.program, self.version, self.command_line)
            writer = self.open_writer(header_text)
            try:
                for record in reader:
                    self.process(record)
                    writer.write(record)
            finally:
                writer.close()
        finally:
            reader.close()

        logger.info(
            "Processed %s alignment records, %s on the reverse strand",
            f"{self.records:,}",
            f"{self.reverse_records:,}",
        )
        if self.summary:
            self.summary_df().to_csv(self.summary, sep="\t", index=False)
            logger.info("Summary: %s", self.summary)
        return 0
