"""Unit tests for the Document Matcher."""

from specguard.modules.matcher import OpenAPIMatcher, match_documents
from specguard.modules.matcher.detectors.parameter_detector import detect_parameter_mismatches
from specguard.modules.matcher.detectors.response_detector import detect_header_mismatches
from specguard.modules.matcher.detectors.schema_detector import detect_schema_mismatches
from specguard.types import (
    Document,
    Header,
    MediaType,
    Operation,
    Parameter,
    ParameterLocation,
    Path,
    Property,
    RequestBody,
    Response,
    Schema,
    SchemaType,
)


def _string() -> Schema:
    return Schema(type=SchemaType.STRING)


def _long() -> Schema:
    return Schema(type=SchemaType.INTEGER, format="int64")


def _entity(**overrides) -> Schema:
    fields = {
        "title": "Entity",
        "type": SchemaType.OBJECT,
        "required": ["code", "id"],
        "properties": [Property(name="code", schema=_string()), Property(name="id", schema=_long())],
    }
    fields.update(overrides)
    return Schema(**fields)


def _document(operation: Operation, pattern: str = "/{id}") -> Document:
    return Document(paths=[Path(pattern=pattern, operations=[operation])])


def _get_entity(**overrides) -> Operation:
    fields = {
        "method": "get",
        "parameters": [Parameter(name="id", location=ParameterLocation.PATH, required=True, schema=_long())],
        "responses": [
            Response(
                status="200",
                description="OK",
                content=[MediaType(content_type="application/json", schema=_entity())],
            ),
            Response(status="404", description="Not Found"),
        ],
    }
    fields.update(overrides)
    return Operation(**fields)


class TestDocuments:
    """Tests for document-level matching."""

    def test_document_matches_itself(self):
        """A document matched against itself has no discrepancies."""
        document = _document(_get_entity())
        assert match_documents(document, document) == []

    def test_order_independent(self):
        """Declaration order of parameters, responses and properties is ignored."""
        expected = _document(_get_entity())
        reordered = _get_entity(
            responses=list(reversed(_get_entity().responses)),
        )
        actual = _document(reordered)
        assert match_documents(expected, actual) == []

    def test_missing_path(self):
        """A path absent from the actual document is one discrepancy."""
        expected = Document(
            paths=[
                Path(pattern="/{id}", operations=[_get_entity()]),
                Path(pattern="/other", operations=[_get_entity()]),
            ]
        )
        actual = _document(_get_entity())

        discrepancies = match_documents(expected, actual)

        assert discrepancies == ["Missing path: /other"]

    def test_missing_operation(self):
        """An operation absent from the actual path is reported."""
        expected = Document(paths=[Path(pattern="/{id}", operations=[_get_entity(), _get_entity(method="delete")])])
        actual = _document(_get_entity())

        assert match_documents(expected, actual) == ["Missing operation: DELETE /{id}"]

    def test_method_case_insensitive(self):
        """Operations are matched by method regardless of case."""
        expected = _document(_get_entity(method="GET"))
        actual = _document(_get_entity())
        assert match_documents(expected, actual) == []

    def test_extra_paths_only_in_strict_mode(self):
        """Undocumented paths are reported in strict mode only."""
        expected = _document(_get_entity())
        actual = Document(
            paths=[
                Path(pattern="/{id}", operations=[_get_entity()]),
                Path(pattern="/health", operations=[_get_entity()]),
            ]
        )

        assert match_documents(expected, actual) == []
        assert OpenAPIMatcher(strict=True).match(expected, actual) == ["Unexpected path: /health"]

    def test_deprecated_operation(self):
        """Operation deprecation must match."""
        discrepancies = match_documents(_document(_get_entity(deprecated=True)), _document(_get_entity()))
        assert discrepancies == ["GET /{id}: deprecated mismatch - expected true, actual false"]


class TestParameters:
    """Tests for parameter matching."""

    def test_missing_parameter(self):
        """A documented parameter absent from the code is reported."""
        expected = [Parameter(name="id", location=ParameterLocation.PATH, required=True, schema=_long())]
        discrepancies = detect_parameter_mismatches(expected, None, "GET /{id}")
        assert discrepancies == ["GET /{id}: missing parameter 'id' in path"]

    def test_same_name_different_location(self):
        """Parameters are keyed by name and location."""
        expected = [Parameter(name="id", location=ParameterLocation.PATH, schema=_long())]
        actual = [Parameter(name="id", location=ParameterLocation.QUERY, schema=_long())]
        discrepancies = detect_parameter_mismatches(expected, actual, "GET /")
        assert discrepancies == ["GET /: missing parameter 'id' in path"]

    def test_extra_parameter_tolerated(self):
        """Extra parameters are only reported in strict mode."""
        actual = [Parameter(name="debug", location=ParameterLocation.QUERY, schema=_string())]
        assert detect_parameter_mismatches([], actual, "GET /") == []
        assert detect_parameter_mismatches([], actual, "GET /", strict=True) == [
            "GET /: unexpected parameter 'debug' in query"
        ]

    def test_required_and_schema_mismatch(self):
        """Required flag and schema of matched parameters are compared."""
        expected = [Parameter(name="limit", location=ParameterLocation.QUERY, required=False, schema=_long())]
        actual = [
            Parameter(
                name="limit",
                location=ParameterLocation.QUERY,
                required=True,
                schema=Schema(type=SchemaType.INTEGER, format="int32"),
            )
        ]

        discrepancies = detect_parameter_mismatches(expected, actual, "GET /")

        assert discrepancies == [
            "GET / > parameter 'limit' in query: required mismatch - expected false, actual true",
            "GET / > parameter 'limit' in query > schema: format mismatch - expected 'int64', actual 'int32'",
        ]


class TestRequestBodies:
    """Tests for request body matching."""

    def test_missing_request_body(self):
        """A documented request body absent from the code is reported."""
        body = RequestBody(content=[MediaType(content_type="application/json", schema=_entity())], required=True)
        expected = _document(_get_entity(method="put", request_body=body))
        actual = _document(_get_entity(method="put"))

        assert match_documents(expected, actual) == ["PUT /{id}: missing requestBody"]

    def test_request_body_required_and_content(self):
        """Body required flag and media types are compared."""
        expected_body = RequestBody(content=[MediaType(content_type="application/json", schema=_entity())], required=True)
        actual_body = RequestBody(content=[MediaType(content_type="text/plain", schema=_string())], required=False)

        discrepancies = match_documents(
            _document(_get_entity(method="post", request_body=expected_body)),
            _document(_get_entity(method="post", request_body=actual_body)),
        )

        assert discrepancies == [
            "POST /{id} > requestBody: required mismatch - expected true, actual false",
            "POST /{id} > requestBody: missing content 'application/json'",
            "POST /{id} > requestBody: unexpected content 'text/plain'",
        ]


class TestResponses:
    """Tests for response matching."""

    def test_missing_and_extra_status(self):
        """Responses are matched by status in both directions."""
        expected = _document(_get_entity())
        actual = _document(
            _get_entity(
                responses=[
                    _get_entity().responses[0],
                    Response(status="400", description="Bad Request"),
                ]
            )
        )

        assert match_documents(expected, actual) == [
            "GET /{id}: missing response 404",
            "GET /{id}: unexpected response 400",
        ]

    def test_description_mismatch(self):
        """Response descriptions are compared."""
        expected = _document(_get_entity(responses=[Response(status="404", description="Missing")]))
        actual = _document(_get_entity(responses=[Response(status="404", description="Not Found")]))

        assert match_documents(expected, actual) == [
            "GET /{id} > response 404: description mismatch - expected 'Missing', actual 'Not Found'"
        ]

    def test_headers(self):
        """Headers are matched by name, case-insensitively."""
        expected = [Header(name="Location", required=True, schema=_string())]
        actual = [Header(name="location", required=False, schema=_string())]

        assert detect_header_mismatches(expected, actual, "POST / > response 201") == [
            "POST / > response 201 > header 'Location': required mismatch - expected true, actual false"
        ]

    def test_no_headers_equals_empty_headers(self):
        """Absent and empty header lists are equivalent."""
        assert detect_header_mismatches(None, [], "GET /") == []


class TestSchemas:
    """Tests for schema comparison."""

    def test_titles_and_defaults_ignored(self):
        """Informational fields are not compared."""
        expected = _entity(title="Something")
        actual = _entity(title="Entity", default={"id": 1})
        assert detect_schema_mismatches(expected, actual, "$") == []

    def test_type_mismatch_stops_descent(self):
        """Object against array is a single descriptive mismatch."""
        expected = _entity()
        actual = Schema(type=SchemaType.ARRAY, items=_entity())

        assert detect_schema_mismatches(expected, actual, "$") == [
            "$: type mismatch - expected 'object', actual 'array'"
        ]

    def test_required_compared_as_sets(self):
        """Required lists are compared regardless of order."""
        expected = _entity(required=["id", "code"])
        assert detect_schema_mismatches(expected, _entity(), "$") == []

        discrepancies = detect_schema_mismatches(_entity(required=["id"]), _entity(), "$")
        assert discrepancies == ["$: required mismatch - expected [id], actual [code, id]"]

    def test_missing_and_extra_properties(self):
        """Properties are matched by name in both directions."""
        expected = _entity(properties=[Property(name="id", schema=_long()), Property(name="name", schema=_string())])

        discrepancies = detect_schema_mismatches(expected, _entity(), "$")

        assert "$: missing property 'name'" in discrepancies
        assert "$: unexpected property 'code'" in discrepancies

    def test_nested_property_mismatch(self):
        """Nested differences name the full property path."""
        expected = Schema(type=SchemaType.ARRAY, items=_entity())
        actual = Schema(
            type=SchemaType.ARRAY,
            items=_entity(properties=[Property(name="code", schema=_string()), Property(name="id", schema=_string())]),
        )

        assert detect_schema_mismatches(expected, actual, "$") == [
            "$.items.properties.id: type mismatch - expected 'integer', actual 'string'"
        ]

    def test_enum_compared_as_sets(self):
        """Enum values are compared regardless of order."""
        expected = Schema(type=SchemaType.STRING, enum=["A", "B"])
        assert detect_schema_mismatches(expected, Schema(type=SchemaType.STRING, enum=["B", "A"]), "$") == []
        assert detect_schema_mismatches(expected, Schema(type=SchemaType.STRING, enum=["A"]), "$") == [
            "$: enum mismatch - expected [A, B], actual [A]"
        ]

    def test_additional_properties_presence(self):
        """additionalProperties present on one side only is reported."""
        expected = Schema(type=SchemaType.OBJECT, additional_properties=_string())
        actual = Schema(type=SchemaType.OBJECT)

        assert detect_schema_mismatches(expected, actual, "$") == ["$.additionalProperties: missing schema"]

    def test_nullable_and_deprecated(self):
        """Nullability and deprecation must match."""
        expected = Schema(type=SchemaType.STRING, nullable=True, deprecated=True)
        assert detect_schema_mismatches(expected, _string(), "$") == [
            "$: nullable mismatch - expected true, actual false",
            "$: deprecated mismatch - expected true, actual false",
        ]
