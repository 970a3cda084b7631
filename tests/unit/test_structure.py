"""Tests for act and sequence detection."""

import pytest

from scriptforge.analyzers.structure import (
    analyze_act,
    analyze_narrative_arc,
    detect_structure,
    find_climax,
    find_inciting_incident,
    is_act_label,
    normalize_location,
    tension_score,
)
from scriptforge.parser import parse


def screenplay(*locations):
    """Build a screenplay with one short scene per location."""
    scenes = [f"INT. {location} - DAY\n\nSomething happens." for location in locations]
    return parse("\n\n".join(scenes) + "\n")


def assert_partition(report):
    """Act scene indices cover every scene exactly once, in order."""
    indices = [i for act in report.acts for i in act.scene_indices]
    assert indices == list(range(report.scene_count))


class TestActLabels:
    """Test act marker recognition."""

    @pytest.mark.parametrize(
        "text", ["Act One", "ACT II", "Act 3", "act five", "Second Act", " ACT IV "]
    )
    def test_act_labels(self, text):
        """Common act marker spellings."""
        assert is_act_label(text)

    @pytest.mark.parametrize("text", ["Acting class", "The final act", "Act Six"])
    def test_not_act_labels(self, text):
        """Text that only resembles an act marker."""
        assert not is_act_label(text)


class TestMarkerActs:
    """Acts from explicit markers."""

    def test_marker_acts(self, load_screenplay):
        """Depth-one sections split the script into acts."""
        report = detect_structure(parse(load_screenplay("act_markers.fountain")))
        assert report.detection_method == "marker"
        assert [act.label for act in report.acts] == ["Act One", "Act Two", "Act Three"]
        assert [act.scene_indices for act in report.acts] == [[0, 1], [2, 3], [4]]
        assert all(act.source == "marker" for act in report.acts)
        assert_partition(report)

    def test_marker_act_lines(self, load_screenplay):
        """Act line ranges run from marker to marker."""
        report = detect_structure(parse(load_screenplay("act_markers.fountain")))
        assert [(a.start_line, a.end_line) for a in report.acts] == [
            (1, 10),
            (11, 20),
            (21, 26),
        ]

    def test_scenes_before_first_marker_join_first_act(self):
        """Leading scenes without a marker stay in act one."""
        text = (
            "INT. A - DAY\n\nOne.\n\n"
            "> ACT ONE <\n\nINT. B - DAY\n\nTwo.\n\n"
            "> ACT TWO <\n\nINT. C - DAY\n\nThree.\n"
        )
        report = detect_structure(parse(text))
        assert report.detection_method == "marker"
        assert [act.scene_indices for act in report.acts] == [[0, 1], [2]]
        assert report.acts[0].start_line == 1

    def test_single_marker_falls_back(self):
        """One marker is not enough for marker-based acts."""
        text = "# Act One\n\nINT. A - DAY\n\nOne.\n"
        assert detect_structure(parse(text)).detection_method == "heuristic"

    def test_deeper_sections_are_not_acts(self):
        """Only depth-one sections count as act markers."""
        text = "## Act One\n\nINT. A - DAY\n\nOne.\n\n## Act Two\n\nINT. B - DAY\n"
        assert detect_structure(parse(text)).detection_method == "heuristic"


class TestHeuristicActs:
    """Acts from splitting the scene list."""

    def test_short_script_is_one_act(self, sample_document):
        """Fewer scenes than the minimum form a single act."""
        report = detect_structure(sample_document)
        assert len(report.acts) == 1
        assert report.acts[0].scene_indices == [0, 1, 2, 3]
        assert report.acts[0].label == "Act One"
        assert (report.acts[0].start_line, report.acts[0].end_line) == (6, 36)

    def test_three_way_split(self):
        """Nine scenes split into three acts of three."""
        report = detect_structure(screenplay(*"ABCDEFGHI"))
        assert [act.scene_indices for act in report.acts] == [
            [0, 1, 2],
            [3, 4, 5],
            [6, 7, 8],
        ]
        assert [act.label for act in report.acts] == ["Act One", "Act Two", "Act Three"]

    def test_configurable_split(self, sample_document):
        """Act count and minimum scene count are parameters."""
        report = detect_structure(sample_document, act_count=2, min_scenes=4)
        assert [act.scene_indices for act in report.acts] == [[0, 1], [2, 3]]
        assert_partition(report)

    def test_more_acts_than_scenes(self):
        """Empty partitions are dropped."""
        report = detect_structure(screenplay("A", "B"), act_count=5, min_scenes=1)
        assert [act.scene_indices for act in report.acts] == [[0], [1]]
        assert [act.number for act in report.acts] == [1, 2]

    def test_no_scenes(self):
        """A document without scenes has no acts."""
        report = detect_structure(parse("Just prose.\n"))
        assert report.acts == []
        assert report.sequences == []

    @pytest.mark.parametrize("count", [1, 2, 7, 8, 13, 30])
    def test_partition_for_any_size(self, count):
        """Acts always partition the scenes."""
        locations = [f"PLACE {i}" for i in range(count)]
        assert_partition(detect_structure(screenplay(*locations)))


class TestSequences:
    """Sequences group scenes inside acts."""

    def test_marker_sequences(self, load_screenplay):
        """Small acts are one sequence labelled by their main location."""
        report = detect_structure(parse(load_screenplay("act_markers.fountain")))
        assert [s.label for s in report.sequences] == [
            "HOUSE Sequence",
            "SHOP Sequence",
            "PARK Sequence",
        ]
        assert [s.act_number for s in report.sequences] == [1, 2, 3]

    def test_location_clusters(self):
        """Runs of the same location become sequences."""
        document = screenplay("BANK", "BANK", "BANK", "PARK", "PARK", "PARK")
        report = detect_structure(document, act_count=1, min_scenes=1)
        assert [s.scene_indices for s in report.sequences] == [[0, 1, 2], [3, 4, 5]]
        assert [s.label for s in report.sequences] == ["BANK Sequence", "PARK Sequence"]

    def test_sequence_cap(self):
        """Clusters never exceed the maximum size."""
        document = screenplay(*["BANK"] * 12)
        report = detect_structure(
            document, act_count=1, min_scenes=1, sequence_max_scenes=4
        )
        assert all(len(s.scene_indices) <= 4 for s in report.sequences)
        flattened = [i for s in report.sequences for i in s.scene_indices]
        assert flattened == list(range(12))

    def test_normalize_location(self):
        """Punctuation and case are ignored when comparing places."""
        assert normalize_location(" Jake's Truck ") == "jakes truck"


class TestActAnalysis:
    """Test per-act diagnostics."""

    def test_single_location_act(self, load_screenplay):
        """Three kitchen scenes trigger the location variety flag."""
        document = parse(load_screenplay("kitchen.fountain"))
        act = detect_structure(document).acts[0]
        analysis = analyze_act(document, act)
        assert analysis.scene_count == 3
        assert analysis.unique_locations == 1
        assert analysis.single_location_flag
        assert analysis.interior_count == 3
        assert analysis.exterior_count == 0
        assert not analysis.pacing_flag

    def test_single_scene_is_not_flagged(self):
        """One scene alone is not a location problem."""
        document = screenplay("BANK")
        analysis = analyze_act(document, detect_structure(document).acts[0])
        assert not analysis.single_location_flag

    def test_sample_act(self, sample_document):
        """Cast presence and longest scene of the sample."""
        act = detect_structure(sample_document).acts[0]
        analysis = analyze_act(sample_document, act)
        assert analysis.total_lines == 36 - 5
        assert analysis.longest_scene == 0
        assert analysis.dialogue_count == 4
        assert analysis.action_count == 4
        assert analysis.character_presence == [("JAKE", 2), ("MARIA", 2)]
        assert analysis.unique_locations == 3


class TestNarrativeArc:
    """Test the whole-script arc heuristics."""

    def test_tension_score(self, sample_document):
        """Exclamations and short action lines add tension."""
        parking_lot = sample_document.scenes[1]
        assert tension_score(parking_lot) == 1
        shouting = parse("INT. A - DAY\n\nBoom!\n\nJAKE\nGET DOWN!\n").scenes[0]
        assert tension_score(shouting) == 1 + 1 + 1 + 4

    def test_arc_for_sample(self, sample_document):
        """Beats are scene indices."""
        arc = analyze_narrative_arc(sample_document, detect_structure(sample_document))
        assert arc.opening == 0
        assert arc.midpoint == 2
        assert arc.resolution == 3
        assert arc.inciting_incident == 1
        assert arc.protagonist == "JAKE"
        assert arc.protagonist_scenes == 2
        assert arc.unique_locations == 3
        assert arc.act_sizes == [4]
        assert not arc.acts_imbalanced

    def test_arc_without_scenes(self):
        """No scenes means no arc."""
        document = parse("")
        assert analyze_narrative_arc(document, detect_structure(document)) is None

    def test_climax_in_final_third(self):
        """The climax is picked from the last third of the script."""
        document = screenplay(*"ABCDEFGHI")
        climax = find_climax(document)
        assert climax is not None
        assert climax.index >= 6

    def test_inciting_incident_fallback(self):
        """Without tension the second scene is the inciting incident."""
        document = screenplay("A", "B", "C")
        assert find_inciting_incident(document).index == 1
