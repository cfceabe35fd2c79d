import logging

import pytest

from transformkit import (
    AlreadyOwnedError,
    Log,
    MultipleOperations,
    TransformationDefinitionError,
    TransformationOperation,
    TransformationTemplate,
    TransformationUtility,
    UnresolvableTargetError,
)


class SampleExtension:
    pass


class SampleTemplate(TransformationTemplate):
    def get_extension_class(self):
        return SampleExtension

    def get_description(self):
        return "Sample template"


class OtherTemplate(TransformationTemplate):
    def get_extension_class(self):
        return "other-group"

    def get_description(self):
        return "Other template"


class ReadProperty(TransformationUtility):
    def get_description(self):
        return "Read a property"


class TouchFile(TransformationOperation):
    def get_description(self):
        return "Touch a file"


def test_template_name_combines_extension_and_template_type():
    template = SampleTemplate()
    assert template.name == "SampleExtension:SampleTemplate"
    assert str(template) == "SampleExtension:SampleTemplate"
    assert OtherTemplate().name == "other-group:OtherTemplate"


def test_base_template_requires_extension_class():
    with pytest.raises(NotImplementedError):
        TransformationTemplate()


def test_registration_assigns_one_based_orders_in_call_order():
    template = SampleTemplate()
    utilities = [ReadProperty().relative(f"file_{idx}.txt") for idx in range(5)]

    for utility in utilities:
        template.add(utility)

    assert list(template.utilities()) == utilities
    assert [u.order for u in template.utilities()] == [1, 2, 3, 4, 5]
    assert all(u.parent is template for u in utilities)


def test_explicit_and_derived_names_scenario():
    template = SampleTemplate()
    first = ReadProperty().relative("config.yml")
    second = ReadProperty().absolute("contextKey")

    assert template.add(first, "init") == "init"
    second_name = template.add(second)

    assert template.utilities() == (first, second)
    assert (first.order, first.name) == (1, "init")
    assert second.order == 2
    assert second_name == second.name == "SampleExtension:SampleTemplate-2-ReadProperty"


def test_derived_names_differ_by_order():
    template = SampleTemplate()
    names = [template.add(ReadProperty().relative("pom.xml")) for _ in range(3)]

    assert all(names)
    assert len(set(names)) == 3


def test_unnamed_unregistered_utility_has_no_name():
    utility = ReadProperty().relative("pom.xml")
    assert utility.name is None
    assert utility.parent is None
    assert utility.order is None


def test_registering_owned_utility_in_second_template_fails_and_keeps_first_owner():
    first = SampleTemplate()
    second = OtherTemplate()
    utility = ReadProperty().relative("pom.xml")
    first.add(utility)

    with pytest.raises(AlreadyOwnedError, match=r"already registered transformation utility"):
        second.add(utility)

    assert utility.parent is first
    assert utility.order == 1
    assert second.utilities() == ()


def test_registering_same_utility_twice_in_one_template_fails():
    template = SampleTemplate()
    utility = ReadProperty().relative("pom.xml")
    template.add(utility)

    with pytest.raises(AlreadyOwnedError) as excinfo:
        template.add(utility)

    assert "SampleExtension:SampleTemplate-1-ReadProperty" in str(excinfo.value)
    assert "SampleExtension:SampleTemplate" in str(excinfo.value)
    assert template.utilities() == (utility,)
    assert isinstance(excinfo.value, TransformationDefinitionError)


def test_missing_target_raises_and_leaves_utility_registered():
    template = SampleTemplate()
    template.add(ReadProperty().relative("a.txt"))
    orphan = ReadProperty()

    with pytest.raises(UnresolvableTargetError) as excinfo:
        template.add(orphan)

    message = str(excinfo.value)
    assert "SampleExtension:SampleTemplate-2-ReadProperty" in message
    assert "transformation template SampleExtension:SampleTemplate" in message
    assert template.utilities()[-1] is orphan
    assert orphan.order == 2
    assert orphan.parent is template


def test_empty_relative_path_targets_application_root():
    template = SampleTemplate()
    utility = ReadProperty().relative("")
    template.add(utility)
    assert utility.relative_path == ""


def test_utilities_view_cannot_change_the_template():
    template = SampleTemplate()
    template.add(ReadProperty().relative("a.txt"))
    view = template.utilities()

    assert isinstance(view, tuple)
    with pytest.raises(AttributeError):
        view.append(ReadProperty())  # type: ignore[attr-defined]

    as_list = list(view)
    as_list.append(ReadProperty().relative("b.txt"))
    assert len(template.utilities()) == 1

    template.add(ReadProperty().relative("c.txt"))
    assert len(view) == 1
    assert len(template.utilities()) == 2


def test_add_rejects_objects_without_step_capabilities():
    template = SampleTemplate()
    with pytest.raises(TypeError, match=r"missing required attribute: parent"):
        template.add(object())  # type: ignore[arg-type]


def test_add_accepts_any_object_with_the_step_capabilities():
    class MinimalStep:
        def __init__(self):
            self.parent = None
            self.order = None
            self._name = None
            self.relative_path = None
            self.absolute_file_from_context_attribute = "sourceFolder"

        @property
        def name(self):
            if self._name or self.parent is None:
                return self._name
            return f"{self.parent.name}-{self.order}-minimal"

        def set_name(self, name):
            self._name = name

        def set_parent(self, parent, order):
            self.parent = parent
            self.order = order

    template = SampleTemplate()
    step = MinimalStep()

    assert template.add(step) == "SampleExtension:SampleTemplate-1-minimal"
    assert step.order == 1


def test_log_helper_registers_log_utility_at_application_root():
    template = SampleTemplate()
    name = template.log("Found %s modules", "moduleCount", level="warning")

    (utility,) = template.utilities()
    assert isinstance(utility, Log)
    assert name == "SampleExtension:SampleTemplate-1-Log"
    assert utility.log_message == "Found %s modules"
    assert utility.attribute_names == ("moduleCount",)
    assert utility.log_level == logging.WARNING
    assert utility.relative_path == ""
    assert utility.save_result is False


def test_add_multiple_registers_adapter_through_add():
    template = SampleTemplate()
    template.add(ReadProperty().relative("pom.xml"), "readPom")
    operation = TouchFile()

    name = template.add_multiple(operation, "javaFiles", "xmlFiles")

    adapter = template.utilities()[1]
    assert isinstance(adapter, MultipleOperations)
    assert name == "SampleExtension:SampleTemplate-2-MultipleOperations"
    assert adapter.template_operation is operation
    assert adapter.file_attributes == ("javaFiles", "xmlFiles")
    assert operation.parent is None


def test_add_multiple_requires_at_least_one_attribute():
    template = SampleTemplate()
    with pytest.raises(ValueError, match=r"at least one context attribute"):
        template.add_multiple(TouchFile())
    assert template.utilities() == ()


def test_registration_is_logged_at_debug(caplog):
    template = SampleTemplate()
    with caplog.at_level(logging.DEBUG, logger="transformkit.template"):
        template.add(ReadProperty().relative("pom.xml"), "readPom")

    assert "Registered utility readPom (order=1) in template SampleExtension:SampleTemplate" in caplog.text
