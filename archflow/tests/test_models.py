"""Tests for model validation rules and payload normalization."""

import pytest
from pydantic import TypeAdapter, ValidationError

from archflow.models.architecture import EvaluationReport
from archflow.models.component import (
    DEFAULT_SUBTYPE_DESCRIPTION,
    ComponentNode,
    ComponentType,
    SubtypeOption,
    has_subtypes,
    humanize,
)
from archflow.models.link import LinkEdge, LinkType
from archflow.models.remote import LinkValidation
from archflow.models.selection import NodeSelection, PreviewSelection, Selection
from archflow.utils.identifiers import (
    default_component_name,
    edge_local_id,
    generate_optimistic_edge_id,
    node_local_id,
)


class TestComponentNode:
    """Test the subtype rule on ComponentNode."""

    def test_subtype_allowed_on_subtype_bearing_type(self):
        """DATABASE nodes may carry a subtype."""
        node = ComponentNode(
            local_id="node-c1",
            remote_component_id="c1",
            component_type=ComponentType.DATABASE,
            subtype="SQL",
            display_name="Users DB",
        )
        assert node.subtype == "SQL"

    def test_subtype_rejected_on_other_types(self):
        """CLIENT nodes cannot carry a subtype."""
        with pytest.raises(ValidationError) as exc_info:
            ComponentNode(
                local_id="node-c1",
                remote_component_id="c1",
                component_type=ComponentType.CLIENT,
                subtype="SQL",
                display_name="Browser",
            )
        assert "do not take a subtype" in str(exc_info.value)

    def test_remote_id_required(self):
        """A node cannot exist without a remote component id."""
        with pytest.raises(ValidationError):
            ComponentNode(
                local_id="node-x",
                component_type=ComponentType.CLIENT,
                display_name="Browser",
            )

    def test_label_prefers_custom_name(self):
        node = ComponentNode(
            local_id="node-c1",
            remote_component_id="c1",
            component_type=ComponentType.CACHE,
            display_name="CACHE-1700000000000",
            custom_name="Sessions",
        )
        assert node.label == "Sessions"
        assert node.model_copy(update={"custom_name": None}).label == "CACHE-1700000000000"

    def test_nodes_are_frozen(self):
        node = ComponentNode(
            local_id="node-c1",
            remote_component_id="c1",
            component_type=ComponentType.CLIENT,
            display_name="Browser",
        )
        with pytest.raises(ValidationError):
            node.display_name = "Other"

    def test_subtype_bearing_types(self):
        assert has_subtypes(ComponentType.DATABASE)
        assert has_subtypes("LOAD_BALANCER")
        assert not has_subtypes(ComponentType.STREAM_PROCESSOR)
        assert not has_subtypes(ComponentType.CLIENT)


class TestLinkEdge:
    """Test the optimistic/confirmed identity rules on LinkEdge."""

    def test_optimistic_edge(self):
        edge = LinkEdge(
            local_id=generate_optimistic_edge_id(),
            source_node_id="node-c1",
            target_node_id="node-c2",
            is_optimistic=True,
        )
        assert edge.local_id.startswith("pending-")
        assert edge.label == "connecting"

    def test_optimistic_edge_cannot_hold_remote_id(self):
        with pytest.raises(ValidationError) as exc_info:
            LinkEdge(
                local_id="pending-1",
                remote_link_id="l1",
                source_node_id="node-c1",
                target_node_id="node-c2",
                is_optimistic=True,
            )
        assert "remote link id" in str(exc_info.value)

    def test_optimistic_edge_cannot_carry_link_type(self):
        with pytest.raises(ValidationError):
            LinkEdge(
                local_id="pending-1",
                source_node_id="node-c1",
                target_node_id="node-c2",
                link_type=LinkType.API_CALL,
                is_optimistic=True,
            )

    def test_confirmed_edge_requires_remote_id_and_type(self):
        with pytest.raises(ValidationError):
            LinkEdge(local_id="edge-l1", source_node_id="a", target_node_id="b", link_type=LinkType.STREAM)
        with pytest.raises(ValidationError):
            LinkEdge(local_id="edge-l1", remote_link_id="l1", source_node_id="a", target_node_id="b")

    def test_confirmed_edge_label(self):
        edge = LinkEdge(
            local_id=edge_local_id("l1"),
            remote_link_id="l1",
            source_node_id="node-c1",
            target_node_id="node-c2",
            link_type=LinkType.DATABASE_QUERY,
        )
        assert edge.local_id == "edge-l1"
        assert edge.label == "DATABASE QUERY"


class TestSubtypeOption:
    """Test normalization of subtype list items."""

    def test_from_identifier(self):
        option = SubtypeOption.from_payload(ComponentType.DATABASE, "SQL")
        assert option.id == option.name == "SQL"
        assert option.description == "Relational database with ACID properties"
        assert option.heuristics is None

    def test_from_object(self):
        option = SubtypeOption.from_payload(ComponentType.CACHE, {
            "name": "IN_MEMORY",
            "heuristics": {"latency": 1},
        })
        assert option.id == "IN_MEMORY"
        assert option.heuristics == {"latency": 1}
        assert option.label == "In Memory"

    def test_object_description_wins(self):
        option = SubtypeOption.from_payload(ComponentType.DATABASE, {
            "id": "SQL", "name": "Postgres", "description": "Managed Postgres",
        })
        assert option.id == "SQL"
        assert option.name == "Postgres"
        assert option.description == "Managed Postgres"

    def test_unknown_subtype_gets_generic_description(self):
        option = SubtypeOption.from_payload(ComponentType.QUEUE, "QUANTUM")
        assert option.description == DEFAULT_SUBTYPE_DESCRIPTION

    def test_object_without_id_or_name(self):
        with pytest.raises(ValueError):
            SubtypeOption.from_payload(ComponentType.QUEUE, {"heuristics": {}})

    def test_humanize(self):
        assert humanize("LEAST_CONNECTIONS") == "Least Connections"


class TestRemotePayloads:
    """Test the service payload models."""

    def test_link_validation_accepts_reason(self):
        verdict = LinkValidation.model_validate({"valid": False, "reason": "Cycle detected"})
        assert verdict.message == "Cycle detected"

    def test_link_validation_accepts_message(self):
        verdict = LinkValidation.model_validate({"valid": False, "message": "Not allowed"})
        assert verdict.message == "Not allowed"

    def test_evaluation_report_aliases_and_extras(self):
        report = EvaluationReport.model_validate({
            "overallScore": 6.2,
            "componentScores": {"c1": 7},
            "recommendations": ["Add replicas"],
            "costEstimate": 1200,
        })
        assert report.overall_score == 6.2
        assert report.component_scores == {"c1": 7}
        assert report.rating == "Good"
        assert report.model_extra == {"costEstimate": 1200}

    @pytest.mark.parametrize(
        "score,rating",
        [(9.0, "Excellent"), (7.0, "Excellent"), (5.0, "Good"), (3.5, "Fair"), (1.0, "Poor")],
    )
    def test_evaluation_rating_bands(self, score, rating):
        assert EvaluationReport(overall_score=score).rating == rating

    def test_rating_without_score(self):
        assert EvaluationReport().rating is None


class TestSelection:
    """Test the selection union."""

    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(Selection)
        preview = adapter.validate_python({"kind": "preview", "component_type": "CACHE"})
        assert isinstance(preview, PreviewSelection)
        assert preview.pinned is False

        node = adapter.validate_python({
            "kind": "node",
            "node": {
                "local_id": "node-c1",
                "remote_component_id": "c1",
                "component_type": "CLIENT",
                "display_name": "Browser",
            },
        })
        assert isinstance(node, NodeSelection)


class TestIdentifiers:
    """Test local id and default name helpers."""

    def test_local_ids(self):
        assert node_local_id("42") == "node-42"
        assert edge_local_id("7") == "edge-7"

    def test_optimistic_ids_are_unique(self):
        ids = {generate_optimistic_edge_id() for _ in range(100)}
        assert len(ids) == 100

    def test_default_component_name(self):
        assert default_component_name("CACHE", 1700000000000) == "CACHE-1700000000000"
        assert default_component_name("QUEUE").startswith("QUEUE-")
