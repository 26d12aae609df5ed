"""
Tests for PlaceholderResolver
"""

import pytest
from flowrunner.flow_engine.variable_resolver import PlaceholderResolver


class TestPlaceholderResolver:
    """Test placeholder resolution"""

    def test_default_used_when_missing(self):
        """Test default literal for a missing path"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('Hello {{user.name | default: Guest}}', {})
        assert result == 'Hello Guest'

    def test_value_preferred_over_default(self):
        """Test resolved value wins over default"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('Hello {{user.name | default: Guest}}', {'user': {'name': 'Ann'}})
        assert result == 'Hello Ann'

    def test_default_used_for_null(self):
        """Test default literal for a null value"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('Hi {{user.name|default:  friend  }}!', {'user': {'name': None}})
        assert result == 'Hi friend!'

    def test_missing_without_default_is_empty(self):
        """Test unresolved reference degrades to empty string"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('Name: {{user.name}}.', {'user': {}})
        assert result == 'Name: .'

    def test_missing_intermediate_never_raises(self):
        """Test traversal through a scalar or a missing key"""
        resolver = PlaceholderResolver()

        assert resolver.resolve('{{a.c.d}}', {'a': {'b': 1}}) == ''
        assert resolver.resolve('x{{a.b.c}}x', {'a': {'b': 1}}) == 'xx'

    def test_nested_path(self):
        """Test resolving nested path"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('{{contact.email}}', {'contact': {'email': 'john@example.com'}})
        assert result == 'john@example.com'

    def test_list_index(self):
        """Test list index in path"""
        resolver = PlaceholderResolver()

        context = {'items': [{'name': 'Item 1'}, {'name': 'Item 2'}]}

        assert resolver.resolve('{{items.1.name}}', context) == 'Item 2'
        assert resolver.resolve('{{items.5.name}}', context) == ''

    def test_preserve_type_int(self):
        """Test that a single placeholder keeps the value's type"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('{{amount}}', {'amount': 1000})
        assert result == 1000
        assert isinstance(result, int)

    def test_preserve_type_list(self):
        """Test that a single placeholder can resolve to a list"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('{{order.items}}', {'order': {'items': [1, 2]}})
        assert result == [1, 2]

    def test_string_interpolation(self):
        """Test string interpolation of several values"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('Name: {{name}}, Age: {{age}}, VIP: {{vip}}', {'name': 'John', 'age': 30, 'vip': True})
        assert result == 'Name: John, Age: 30, VIP: true'

    def test_whole_float_interpolation(self):
        """Test whole-number floats render without a trailing .0"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('Total: {{total}}, rate: {{rate}}', {'total': 12.0, 'rate': 0.5})
        assert result == 'Total: 12, rate: 0.5'

        # A lone placeholder keeps the float itself
        assert resolver.resolve('{{total}}', {'total': 12.0}) == 12.0

    def test_object_interpolation_is_json(self):
        """Test composite values render as JSON inside text"""
        resolver = PlaceholderResolver()

        result = resolver.resolve('data={{payload}}', {'payload': {'a': 1}})
        assert result == 'data={"a": 1}'

    def test_dict_resolution(self):
        """Test resolving placeholders in dict"""
        resolver = PlaceholderResolver()

        data = {
            'contact_email': '{{email}}',
            'subject': 'Hello {{email}}',
            'retries': 3,
        }

        result = resolver.resolve(data, {'email': 'test@example.com'})
        assert result == {
            'contact_email': 'test@example.com',
            'subject': 'Hello test@example.com',
            'retries': 3,
        }

    def test_list_resolution(self):
        """Test resolving placeholders in list"""
        resolver = PlaceholderResolver()

        result = resolver.resolve(['{{value}}', 'static', {'nested': ['{{value}}']}], {'value': 'test'})
        assert result == ['test', 'static', {'nested': ['test']}]

    @pytest.mark.parametrize('value', [None, 42, 3.5, True])
    def test_non_string_passthrough(self, value):
        """Test non-string templates pass through unchanged"""
        resolver = PlaceholderResolver()

        assert resolver.resolve(value, {'x': 1}) is value

    def test_template_is_not_modified(self):
        """Test resolution builds a new structure"""
        resolver = PlaceholderResolver()

        template = {'a': ['{{x}}']}
        resolver.resolve(template, {'x': 'y'})

        assert template == {'a': ['{{x}}']}

    def test_find_unresolved(self):
        """Test listing unresolved placeholders"""
        resolver = PlaceholderResolver()

        template = {'url': '/users/{{user.id}}', 'h': ['{{token}}', '{{trace | default: none}}']}

        unresolved = resolver.find_unresolved(template, {'user': {}})
        assert unresolved == ['user.id', 'token']

    def test_find_unresolved_all_resolved(self):
        """Test nothing reported when every placeholder resolves"""
        resolver = PlaceholderResolver()

        assert resolver.find_unresolved('{{name}}', {'name': 'John'}) == []
