"""
apidoc — Metadata Joiner Unit Tests
====================================

What we test:
    ✅ Route ids are deterministic and depend on methods and URLs only
    ✅ Global responses fill in when a handler declares none
    ✅ Title/desc/develop/index default to empty values
    ✅ Per-handler comment flag overrides the copyright default
"""

from apidoc.core.joiner import MetadataJoiner, route_id
from apidoc.metadata import AttributeMetadataProvider, api_method, api_responses
from apidoc.schemas.document import ResponseCode

from conftest import StubParamExtractor, StubReturnExtractor


class TestRouteId:
    def test_deterministic(self, make_handler):
        assert route_id(make_handler("/users")) == route_id(make_handler("/users"))
        assert len(route_id(make_handler("/users"))) == 16

    def test_depends_on_methods_and_urls(self, make_handler):
        base = route_id(make_handler("/users"))
        assert route_id(make_handler("/users", methods=("POST",))) != base
        assert route_id(make_handler("/users", "/people")) != base

    def test_independent_of_endpoint(self, make_handler):
        def other():
            return {}
        assert route_id(make_handler("/users", endpoint=other)) == route_id(make_handler("/users"))


class TestMetadataJoiner:
    def make_joiner(self, copyright):
        return MetadataJoiner(
            copyright=copyright,
            provider=AttributeMetadataProvider(),
            param_extractor=StubParamExtractor(),
            return_extractor=StubReturnExtractor(),
            example_url=lambda doc_id: f"http://host/api/example/{doc_id}.json",
        )

    def test_undeclared_handler_gets_defaults(self, copyright, make_handler):
        doc = self.make_joiner(copyright).join(make_handler("/users"), "abc")

        assert doc.id == "abc"
        assert doc.urls == ("/users",)
        assert doc.methods == ("GET",)
        assert doc.responses == copyright.global_response
        assert (doc.title, doc.desc, doc.develop, doc.index) == ("", "", False, 0)
        assert doc.comment_in_return_example is True
        assert doc.return_json == '{"ok": true}'
        assert doc.example_url == "http://host/api/example/abc.json"

    def test_declared_metadata_wins(self, copyright, make_handler):
        @api_method(title="Get user", desc="By id", develop=True, index=4, comment_in_return_example=False)
        @api_responses((404, "no such user"))
        def get_user():
            return {}

        doc = self.make_joiner(copyright).join(make_handler("/users/{id}", endpoint=get_user), "abc")

        assert doc.responses == (ResponseCode(code=404, msg="no such user"),)
        assert (doc.title, doc.desc, doc.develop, doc.index) == ("Get user", "By id", True, 4)
        assert doc.comment_in_return_example is False

    def test_unset_comment_flag_uses_copyright_default(self, copyright, make_handler):
        @api_method(title="Get user")
        def get_user():
            return {}

        quiet = copyright.model_copy(update={"comment_in_return_example": False})
        doc = self.make_joiner(quiet).join(make_handler(endpoint=get_user), "abc")
        assert doc.comment_in_return_example is False

    def test_empty_global_response(self, copyright, make_handler):
        bare = copyright.model_copy(update={"global_response": ()})
        doc = self.make_joiner(bare).join(make_handler(), "abc")
        assert doc.responses == ()
