from styledshift.css.props import expand_declaration, output_property, static_value, to_camel

__all__ = ["expand_declaration", "output_property", "static_value", "to_camel"]
