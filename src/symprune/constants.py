from __future__ import annotations

# Mangled-name tail codes for declarations worth reporting. The structural
# codes (witness tables, metadata accessors) only survive linking when the
# type or conformance is in use.
ALLOW_LIST_SUFFIXES = frozenset(
    {
        "F",  # function
        "FC",  # initializer
        "FD",  # deinitializer
        "FE",  # convenience initializer
        "FG",  # generic initializer
        "FH",  # required initializer
        "FZ",  # static/global function
        "FY",  # async function
        "FYA",  # async accessor or closure thunk
        "FYD",  # async deinitializer
        "FYT",  # async throwing function
        "FYTA",  # async throwing accessor
        "FYZ",  # async static function
        "FQ",  # generic specialization
        "FT",  # throwing function
        "FTZ",  # throwing static function
        "FCY",  # async initializer
        "FCZ",  # static initializer
        "FCF",  # factory initializer
        "FYQ",  # async reabstraction function
        "FCQ",  # initializer with context
        "TF",  # top-level function
        "TFZ",  # top-level static function
        "VP",  # static property
        "TW",  # type witness
        "WL",  # witness table
        "MN",  # nominal metadata
        "MF",  # metadata function
        "AAMA",  # associated type metadata access
        "WXX",
        "WCPTM",
        "WCA",
    }
)

# Lower-cased substrings marking compiler or runtime generated symbols.
NOISE_SUBSTRINGS = (
    "symbolic",
    "literal string",
    "___unnamed",
    "_reflection_descriptor",
    "__swift5",
    "__swift4",
    "__swift3",
    "_objc_protocol_$_",
    "_objc_$_protocol_refs_",
    "_objc_label_protocol_$_",
    "_objc_class_$_",
    "_objc_metaclass_$_",
    "get_witness_table",
    "get_underlying",
    "witness_table",
    ".str.",
    "l_.str",
    "previewfmf_",
    "previewregistry",
    "previewprovider",
    "l_keypath_get_arg_layout",
    "l_keypath_arg_init",
    "withmutation",
    "shouldnotifyobservers",
    "block_copy_helper",
    "block_destroy_helper",
    "block_descriptor",
    "keypath_get_selector",
    "swift_get_extra_inhabitant_index",
    "_swift_store_extra_inhabitant_index",
    "swift_store_extra_inhabitant_index",
    "associated conformance",
    "_resumecheckedthrowingcontinuation",
    "fmu_",
)

NOISE_PREFIXES = (
    "_objc_",
    "__swift_force_load",
    "__swift_runtime",
    "__swift_instantiate",
    "___swift_",
    "l_.str",
    "l_metadata",
    "l_objectdestroy",
    "l_get_witness_table",
    "l_get_underlying",
    "l_keypath",
    "l_objc",
)

DEFER_MARKER = "$deferl_"
RESUME_SUFFIX = ".resume"
RESUME_MARKER = "mn.resume"

# Container types of the UI framework that wrap user views.
COMPOSITE_VIEW_MANGLED_TYPES = (
    "SwiftUI15ModifiedContent",
    "SwiftUI17_ConditionalContent",
)

PRIVATE_DISCRIMINATOR_TOKEN = "33_"

UNWIND_TABLE_MARKER = ".eh_frame"
UNWIND_FRAME_MARKERS = ("FDE", "CFI")

RELOCATION_INDICATORS = ("$got", "@got", ".got", " got", "got[", "got_")

# Substrings only visible after demangling.
DEMANGLED_NOISE_TOKENS = (
    "protocol witness",
    "dispatch thunk",
    "reabstraction thunk",
    "partial apply forwarder",
    "partial apply",
    "implicit closure #",
    "closure #",
    "value witness",
    "witness table",
    "suspend resume partial function",
    "outlined copy",
    "outlined consume",
    "outlined assign",
    "outlined init",
    "outlined destroy",
    "type metadata accessor",
    "type metadata completion",
    "associated conformance",
    "specialized globalinit",
    "one-time initialization function",
    "variable initialization expression",
    "materialize for set",
    "key path setter",
    "key path getter",
    "heap destroyer",
    "heap assignor",
    "destroyer",
    "assignor",
    "destructor",
    ".__derived_enum_equals",
    "metadata instantiation cache",
    "protocol conformance descriptor runtime record",
    "protocol conformance descriptor for",
    "property descriptor for",
    "type metadata for",
    "nominal type descriptor runtime record",
    "opaque type descriptor runtime record",
    "opaque type descriptor for",
    "lazy cache variable for type metadata",
    "demangling cache variable for",
    "reflection metadata",
    "anonymous descriptor",
    "associated type witness table accessor",
    "base witness table accessor",
    "method descriptor",
    ".modify :",
    "default argument",
    "defaultvalue",
    "default value",
    "async function pointer",
    "property wrapper backing initializer",
    "previewfmf_",
    "previewregistry",
    "previewprovider",
    "type metadata instantiation function",
    "l_keypath_get_arg_layout",
    "l_keypath_arg_init",
    "withmutation",
    "shouldnotifyobservers",
    "__allocating_init",
    "observation",
    "accessormetadata",
    "fmu_",
)

DEMANGLED_COMPOSITE_VIEW_MARKERS = (
    "(extension in SwiftUI)",
    "SwiftUI.ModifiedContent",
    "SwiftUI.ViewBuilder",
    "SwiftUI.TupleView",
)

SYSTEM_MODULE_NAMES = frozenset(
    {
        "Swift",
        "SwiftUI",
        "Combine",
        "Foundation",
        "UIKit",
        "AppKit",
        "CoreData",
        "CoreGraphics",
        "SpriteKit",
        "SceneKit",
        "Metal",
        "MetalKit",
        "CoreLocation",
        "CoreImage",
        "CoreMedia",
        "AVFoundation",
        "GameplayKit",
        "MapKit",
        "WidgetKit",
        "Contacts",
        "ContactsUI",
        "CloudKit",
        "Network",
        "AuthenticationServices",
        "UserNotifications",
        "ReplayKit",
        "GameKit",
        "CoreMotion",
        "CoreTelephony",
        "WebKit",
        "StoreKit",
        "Intents",
        "Vision",
        "RealityKit",
        "ARKit",
        "PDFKit",
        "DeveloperToolsSupport",
    }
)

RUNTIME_MODULE_PREFIX = "swift"

# Prefix marker of a reference to an imported (C/Objective-C) declaration.
FOREIGN_DECLARATION_MARKER = "So"

MANGLED_PREFIXES = ("$s", "$S")

# Trailing kind-code terminator stripped before reading the kind code.
SUFFIX_TERMINATOR = "Z"

MODULE_STRIP_PRECEDING_CHARACTERS = frozenset(" \t\n\r(<[{=:,&@*+->.?!'\"|/")

IGNORABLE_OBJECT_MARKERS = (
    ".framework/",
    "/Toolchains/",
    "/Platforms/",
    "SourcePackages/checkouts",
    "/Pods/",
)
IGNORABLE_OBJECT_MARKERS_LOWERCASED = (
    ".dylib",
    "linker synthesized",
)

LITERAL_MARKER = "literal string:"

SOURCE_INDEX_EXTENSIONS = frozenset({".swift", ".m", ".mm", ".c", ".cc", ".cpp", ".metal"})
SOURCE_INDEX_SKIPPED_DIRECTORIES = frozenset(
    {
        ".build",
        "build",
        "Build",
        "DerivedData",
        ".git",
        ".svn",
        "xcuserdata",
        "xcshareddata",
        "node_modules",
    }
)
DEPENDENCY_MANAGER_DIRECTORY = "Pods"

# Extensions tried when probing the project root for an object's source.
PROBE_EXTENSIONS = (".swift", ".m")

RUNTIME_GENERATED_SOURCE_MARKER = "generatedassetsymbols"

# Gating on source availability only applies once this many objects resolved.
SOURCE_MATCH_THRESHOLD = 8

DISPLAY_MODULE_MIN_COUNT = 10
DISPLAY_MODULE_MIN_SHARE = 0.05

DEMANGLE_BATCH_SIZE = 200
DEMANGLE_COMMAND = ("xcrun", "swift-demangle")
DEMANGLE_SEPARATOR = " ---> "
